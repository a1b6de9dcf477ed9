"""Path parameter converters for typed segments like ``{id:int}``."""

# param_type -> regex a segment must match
CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "path": r".+",
}
