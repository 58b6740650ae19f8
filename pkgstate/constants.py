"""
Shared constants for pkgstate.
"""


class _Absent:
    """Marker for "no value", distinct from None."""

    _instance = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __copy__(self) -> "_Absent":
        return self

    def __deepcopy__(self, memo) -> "_Absent":
        return self

    def __reduce__(self):
        return (_Absent, ())


ABSENT = _Absent()

# Key constraints
MAX_KEY_LENGTH = 250

# Package state keys
FAVORITE_LETTERS_KEY = "favorite_letters"
REMOTE_IDENTIFIER_KEY = "remote_identifier"
DEFAULT_FAVORITE_LETTERS = ("a", "b", "c")
