"""Registry of supported country policies."""

from __future__ import annotations

from .policy import CountryPolicy
from .policy_ca import CanadaPolicy
from .policy_us import UnitedStatesPolicy
from .schema import Profile


class UnknownCountryError(KeyError):
    """Raised when no policy is registered for a country code."""


_POLICIES: dict[str, CountryPolicy] = {
    policy.code: policy for policy in (UnitedStatesPolicy(), CanadaPolicy())
}


def available_countries() -> list[str]:
    return sorted(_POLICIES)


def get_policy(code: str) -> CountryPolicy:
    try:
        return _POLICIES[code.upper()]
    except (KeyError, AttributeError):
        raise UnknownCountryError(
            f"country: '{code}' is not supported; expected one of [{', '.join(available_countries())}]"
        ) from None


def default_profile_for(code: str | None) -> Profile | None:
    """Profile defaults for a country, or None when the code is unknown."""
    if code is None:
        return None
    try:
        return get_policy(code).default_profile()
    except UnknownCountryError:
        return None
