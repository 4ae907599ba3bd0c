"""
WhatsApp Chat Identifier Resolution

Maps a destination specifier (raw phone number or explicit chat id) to a
primary outbound target plus one alternate target.

WhatsApp addresses the same numeric identity two ways:
- phone contact:  <digits>@c.us
- linked device:  <digits>@lid

Which one a number belongs to cannot be looked up, so the resolver guesses
and always provides the other scheme as the fallback.
"""

import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class InvalidSpecifierError(ValueError):
    """Destination specifier cannot produce a valid chat address."""
    pass


class AddressingScheme(str, Enum):
    """Addressing scheme tag of a chat address."""

    PHONE_CONTACT = "phone-contact"
    LINKED_DEVICE = "linked-device-id"
    GROUP = "group"
    EXPLICIT_REPLY = "explicit-reply-reference"


SCHEME_SUFFIXES = {
    AddressingScheme.PHONE_CONTACT: "@c.us",
    AddressingScheme.LINKED_DEVICE: "@lid",
    AddressingScheme.GROUP: "@g.us",
}

# Suffixes removed by clean_id. @lid is kept on purpose so the consumer can
# tell linked-device senders apart.
_CLEANABLE_SUFFIXES = ("@c.us", "@s.whatsapp.net", "@g.us")


@dataclass(frozen=True)
class TargetRef:
    """A fully-qualified chat address tagged with its addressing scheme."""

    scheme: AddressingScheme
    address: str

    @classmethod
    def from_address(cls, address: str) -> "TargetRef":
        """Tag an explicit chat address by its suffix."""
        for scheme, suffix in SCHEME_SUFFIXES.items():
            if address.endswith(suffix):
                return cls(scheme, address)
        return cls(AddressingScheme.EXPLICIT_REPLY, address)

    def __str__(self) -> str:
        return self.address


@dataclass(frozen=True)
class ChatTarget:
    """Primary outbound address and the alternate tried if it fails."""

    primary: TargetRef
    alternate: Optional[TargetRef] = None


def clean_id(address: Optional[str]) -> Optional[str]:
    """Strip the scheme suffix from a chat address for display and grouping."""
    if not address:
        return None
    for suffix in _CLEANABLE_SUFFIXES:
        if address.endswith(suffix):
            return address[: -len(suffix)]
    return address


class IdentifierResolver:
    """
    Resolves destination specifiers into ChatTargets.

    Args:
        home_country_code: Country code of the deployment (e.g. "963")
        trunk_prefix: Local trunk prefix rewritten to the country code (e.g. "09")
        linked_device_min_length: Digit count from which a foreign number is
            assumed to be a linked-device id
    """

    def __init__(
        self,
        home_country_code: str = "963",
        trunk_prefix: str = "09",
        linked_device_min_length: int = 15,
    ):
        self.home_country_code = home_country_code
        self.trunk_prefix = trunk_prefix
        self.linked_device_min_length = linked_device_min_length

    def normalize_number(self, specifier: str) -> str:
        """
        Reduce a raw phone number to its international digit string.

        Raises:
            InvalidSpecifierError: No digits left after cleaning
        """
        # Arabic-Indic and other decimal digits count as their ASCII value
        digits = "".join(
            str(unicodedata.decimal(ch)) for ch in str(specifier) if ch.isdecimal()
        )
        if self.trunk_prefix and digits.startswith(self.trunk_prefix):
            digits = self.home_country_code + digits[len(self.trunk_prefix):]
        if not digits:
            raise InvalidSpecifierError(f"No digits in phone specifier: {specifier!r}")
        return digits

    def classify(self, digits: str) -> AddressingScheme:
        """Best-effort guess of the addressing scheme for a digit string."""
        if (
            len(digits) >= self.linked_device_min_length
            and not digits.startswith(self.home_country_code)
        ):
            return AddressingScheme.LINKED_DEVICE
        return AddressingScheme.PHONE_CONTACT

    def resolve(self, specifier: str, explicit: bool = False) -> ChatTarget:
        """
        Resolve a specifier into a primary and alternate target.

        Args:
            specifier: Raw phone number, or a full chat id when explicit
            explicit: Use the specifier verbatim (reply references)

        Raises:
            InvalidSpecifierError: Empty specifier or no usable digits
        """
        if explicit:
            if not specifier or not str(specifier).strip():
                raise InvalidSpecifierError("Empty reply reference")
            primary = TargetRef.from_address(str(specifier).strip())
            return ChatTarget(primary=primary, alternate=self.alternate(primary))

        digits = self.normalize_number(specifier)
        scheme = self.classify(digits)
        other = (
            AddressingScheme.PHONE_CONTACT
            if scheme == AddressingScheme.LINKED_DEVICE
            else AddressingScheme.LINKED_DEVICE
        )
        return ChatTarget(
            primary=TargetRef(scheme, digits + SCHEME_SUFFIXES[scheme]),
            alternate=TargetRef(other, digits + SCHEME_SUFFIXES[other]),
        )

    def alternate(self, ref: TargetRef) -> TargetRef:
        """
        Toggle only the scheme suffix of a target.

        Groups and unrecognized references have no other scheme and are
        returned unchanged.
        """
        if ref.scheme == AddressingScheme.PHONE_CONTACT:
            other = AddressingScheme.LINKED_DEVICE
        elif ref.scheme == AddressingScheme.LINKED_DEVICE:
            other = AddressingScheme.PHONE_CONTACT
        else:
            return ref

        base = ref.address[: -len(SCHEME_SUFFIXES[ref.scheme])]
        return TargetRef(other, base + SCHEME_SUFFIXES[other])
