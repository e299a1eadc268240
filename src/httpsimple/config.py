from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from httpsimple.version import __version__

T = TypeVar("T")

DEFAULT_USER_AGENT = f"httpsimple/{__version__}"
DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_REDIRECTS = 5


class ValueFromEnvironment(Generic[T]):
    """A configuration value that is either passed explicitly or read from an
    environment variable, falling back to a default.

    The name property reports where the value came from, so error messages
    can point the user at the right knob.
    """

    __slots__ = ("_envvar", "_name", "_value", "_from_envvar")

    def __init__(
        self,
        envvar: str,
        name: str,
        parse: Callable[[str], T],
        default: T,
        value: Optional[T] = None,
    ):
        self._envvar = envvar
        self._name = name
        self._from_envvar = False
        if value is not None:
            self._value = value
            return

        raw = os.environ.get(envvar)
        if not raw:
            self._value = default
            return

        self._from_envvar = True
        try:
            self._value = parse(raw)
        except ValueError as e:
            raise ValueError(
                f"invalid {name}: {e} (check {envvar} is correct)"
            ) from e

    def __str__(self):
        return str(self.value)

    @property
    def name(self) -> str:
        return self._envvar if self._from_envvar else self._name

    @property
    def value(self) -> T:
        return self._value


def parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def parse_timeout(raw: str) -> float:
    timeout = float(raw)
    if timeout <= 0:
        raise ValueError(f"must be positive, got {raw!r}")
    return timeout


def parse_max_redirects(raw: str) -> int:
    count = int(raw)
    if count < 0:
        raise ValueError(f"must not be negative, got {raw!r}")
    return count


@dataclass(frozen=True)
class Config:
    """Settings shared by the transports.

    Attributes:
        user_agent: Value of the User-Agent header sent with every request.
        timeout: Timeout, in seconds, for connecting and for each read.
        max_redirects: Maximum number of redirects to follow.
        verify: Whether to verify TLS certificates.
    """

    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = DEFAULT_TIMEOUT
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    verify: bool = True

    @classmethod
    def from_environment(
        cls,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        max_redirects: Optional[int] = None,
        verify: Optional[bool] = None,
    ) -> Config:
        """Build a configuration from the HTTPSIMPLE_* environment variables.

        Explicit arguments take precedence over the environment.

        Raises:
            ValueError: if an environment variable holds an invalid value.
        """
        return cls(
            user_agent=ValueFromEnvironment(
                "HTTPSIMPLE_USER_AGENT",
                "user_agent",
                str,
                DEFAULT_USER_AGENT,
                user_agent,
            ).value,
            timeout=ValueFromEnvironment(
                "HTTPSIMPLE_TIMEOUT",
                "timeout",
                parse_timeout,
                DEFAULT_TIMEOUT,
                timeout,
            ).value,
            max_redirects=ValueFromEnvironment(
                "HTTPSIMPLE_MAX_REDIRECTS",
                "max_redirects",
                parse_max_redirects,
                DEFAULT_MAX_REDIRECTS,
                max_redirects,
            ).value,
            verify=ValueFromEnvironment(
                "HTTPSIMPLE_VERIFY_SSL", "verify", parse_bool, True, verify
            ).value,
        )
