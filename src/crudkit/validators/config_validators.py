def to_uppercase(value: str | None) -> str | None:
    """
    Uppercase a string setting, leaving None (unset) untouched.
    """
    if value is None:
        return None
    return value.strip().upper()


def to_lowercase(value: str | None) -> str | None:
    """
    Lowercase a string setting, leaving None (unset) untouched.
    """
    if value is None:
        return None
    return value.strip().lower()
