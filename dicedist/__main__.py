import logging
import os
import sys
import typing

from dicedist import settings as _settings
from dicedist.dice_parser import parse
from dicedist.errors import DiceRollError

USAGE = """usage: dicedist <expr> [<n>]

Parameters:
    expr - Dice notation, e.g. 3d6, 4d6dl1, 1d20adv+5, 2d6+1d4-5.
           Suffixes: k/kh/kl/d/dl/dh <n> keep or drop dice,
           adv/dis [<n>] keep the best/worst of n rolls.
    n    - How many times to roll. Defaults to the default_rolls setting.

Result:
    Prints the mean, minimum and maximum of the expression's total
    and n random rolls of it.

Settings are read from ./settings.yaml when it exists."""


def _format_number(x: float) -> str:
    result = f"{float(x):.2f}"
    if result.endswith(".00"):
        result = result[:-3]
    return result


def main(argv: typing.Optional[typing.List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv
    args = argv[1:]
    if not args or len(args) > 2 or args[0] in ("-h", "--help"):
        print(USAGE)
        return 1 if not args or len(args) > 2 else 0

    if os.path.exists("settings.yaml"):
        try:
            _settings.configure("settings.yaml")
        except DiceRollError as e:
            print("Error in settings.yaml: %s" % e.args[0])
            return 1
    logging.basicConfig(level=_settings.settings["log_level"])

    try:
        if len(args) == 2:
            n_rolls = int(args[1])
        else:
            n_rolls = _settings.settings["default_rolls"]
    except ValueError:
        print("Error: argument was not a number: %s" % args[1])
        return 1

    try:
        totals = parse(args[0]).sum()
    except DiceRollError as e:
        print("Error in input: %s" % e.args[0])
        return 1

    print("Input: %s" % args[0])
    print(
        "Mean: %s  Min: %s  Max: %s"
        % (
            _format_number(totals.average()),
            _format_number(totals.min()),
            _format_number(totals.max()),
        )
    )
    print("Result: %s" % ", ".join(str(x) for x in totals.roll(n_rolls)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
