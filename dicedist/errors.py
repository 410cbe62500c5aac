class DiceRollError(ValueError):
    pass


class ConstructionError(DiceRollError):
    pass


class ParseError(DiceRollError):
    def __init__(self, term: str) -> None:
        super().__init__("Couldn't parse the dice term '%s'." % term)
        self.term = term


class RerollOverflowError(DiceRollError):
    def __init__(self, roll_max: int) -> None:
        super().__init__(
            "Got more than %s rolls deep, you're probably infinite-looping."
            % roll_max
        )
        self.roll_max = roll_max


class SettingsError(DiceRollError):
    pass
