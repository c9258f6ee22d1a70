__all__ = (
    "PagewalkerError",
    "ConfigurationError",
    "NavigationError",
    "MissingElementError",
    "BodyUnavailable",
)


class PagewalkerError(Exception): ...


class ConfigurationError(PagewalkerError): ...


class NavigationError(PagewalkerError): ...


class MissingElementError(NavigationError):
    def __init__(self, selector: str) -> None:
        super().__init__(f"Expected element {selector!r} is missing from the page")
        self.selector = selector


class BodyUnavailable(PagewalkerError): ...
