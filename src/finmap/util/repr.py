import abc
import logging

logger = logging.getLogger(__name__)


def _fallback(obj: object) -> str:
    return f"<... {type(obj).__qualname__} at {id(obj):#x} ...>"


class SafeRepr:
    """Mixin for containers of user values, whose :func:`repr` may raise."""

    def __repr__(self) -> str:
        try:
            return self.__safe_repr__()
        except Exception:
            logger.exception("Unable to format `%s` with repr().", type(self).__qualname__)
            return _fallback(self)

    @abc.abstractmethod
    def __safe_repr__(self) -> str:
        ...


class SafeStr:
    """Mixin for exceptions that embed user values in their message."""

    def __str__(self) -> str:
        try:
            return self.__safe_str__()
        except Exception:
            logger.exception("Unable to format `%s` with str().", type(self).__qualname__)
            return _fallback(self)

    @abc.abstractmethod
    def __safe_str__(self) -> str:
        ...
