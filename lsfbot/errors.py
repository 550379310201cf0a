class LsfBotError(RuntimeError):
    pass


class ExtractError(LsfBotError):
    """Any failure that aborts a timetable extraction run."""


class FetchError(ExtractError):
    pass


class MarkupError(ExtractError):
    """An expected node was missing from a fetched page."""

    def __init__(self, selector: str, url: str | None = None):
        self.selector = selector
        self.url = url
        where = f" on {url}" if url else ""
        super().__init__(f"No match for selector `{selector}`{where}")


class ParseError(ExtractError):
    pass


class UnknownEnumValue(ParseError):
    def __init__(self, kind: str, value: str):
        self.value = value
        super().__init__(f"Unknown {kind} `{value}`")


class UnknownCourseName(UnknownEnumValue):
    def __init__(self, value: str):
        super().__init__("course name", value)


class UnknownGroupName(UnknownEnumValue):
    def __init__(self, value: str):
        super().__init__("group", value)


class PersistenceError(LsfBotError):
    pass


class DeliveryError(LsfBotError):
    pass
