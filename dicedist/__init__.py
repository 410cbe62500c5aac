from dicedist.errors import (
    ConstructionError,
    DiceRollError,
    ParseError,
    RerollOverflowError,
    SettingsError,
)
from dicedist.faces import count_faces, flatten_faces, map_faces, sum_faces
from dicedist.grouping import bucket_pairs, default_reroll_key
from dicedist.reroll import Continue, Done, ExplodeSummary, Step, Terminal
from dicedist.distribution import (
    Distribution,
    and_,
    combine,
    die,
    from_faces,
    from_pairs,
    nd,
    point,
    replace_faces,
)
from dicedist.dice_parser import parse
