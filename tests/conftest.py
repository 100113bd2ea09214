import pytest

from quartiles.dictionary import Dictionary

PUZZLE_ONE = [
    "azz", "th", "ss", "tru",
    "ref", "fu", "ra", "nih",
    "cro", "mat", "wo", "sh",
    "re", "rds", "tic", "il",
    "lly", "zz", "is", "ment",
]

PUZZLE_ONE_WORDS = [
    "cross", "crosswords", "fully", "fuss", "fuzz", "is", "mat", "nihilistic",
    "rail", "rally", "rare", "rash", "razz", "razzmatazz", "recross", "ref",
    "refresh", "refreshment", "rewords", "this", "thrash", "thresh", "tic",
    "truss", "truth", "truthfully", "words", "wore",
]

PUZZLE_ONE_QUARTILES = {"crosswords", "nihilistic", "razzmatazz", "refreshment", "truthfully"}

PUZZLE_TWO = [
    "tab", "nch", "ec", "dis",
    "oo", "per", "mb", "ous",
    "cour", "le", "mar", "te",
    "zle", "su", "la", "ba",
    "ket", "del", "il", "chi",
]

PUZZLE_TWO_WORDS = [
    "bail", "bale", "bamboo", "bamboozle", "bate", "chi", "chinchilla",
    "courteous", "delectable", "discourteous", "diskette", "lamb", "late",
    "leper", "market", "per", "peril", "perilous", "super", "supermarket",
    "tab", "table", "taboo",
]

PUZZLE_TWO_QUARTILES = {"bamboozle", "chinchilla", "delectable", "discourteous", "supermarket"}

# Words no fragment combination above can spell
DECOY_WORDS = ["hello", "world", "zebra", "quartile", "crosswalk", "truant"]


def word_list() -> list[str]:
    return sorted(set(PUZZLE_ONE_WORDS + PUZZLE_TWO_WORDS + DECOY_WORDS))


@pytest.fixture
def dictionary() -> Dictionary:
    return Dictionary(word_list())


@pytest.fixture
def dictionary_dir(tmp_path):
    """A directory holding english.txt with the fixture word list."""
    (tmp_path / "english.txt").write_text("\n".join(word_list()) + "\n", encoding="utf-8")
    return tmp_path
