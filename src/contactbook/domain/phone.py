"""Phone number normalization: the comparison key used for deduplication."""

import re

import phonenumbers

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(raw: str | None, default_region: str | None = None) -> str:
    """Return the deduplication key for a raw phone string.

    Without default_region every non-digit character is removed
    ("+1 (555) 111-2222" -> "15551112222"). Empty or all-non-digit input
    gives "".

    With default_region (e.g. "US") a number that is possible for that region
    becomes its E.164 form, so "555-111-2222" and "+1 (555) 111-2222" both map
    to "+15551112222". Leading zeros of the national number are kept
    ("+39 06 ..." and "+39 6 ..." stay distinct). Numbers phonenumbers cannot
    use fall back to their digits, with the leading "+" kept if the input had
    one. The result depends only on that "+" and the digits, and is itself a
    fixed point. Never raises.
    """
    text = str(raw or "")
    digits = _NON_DIGITS.sub("", text)
    if not digits or not default_region:
        return digits
    prefix = "+" if text.lstrip().startswith("+") else ""
    fallback = prefix + digits
    try:
        parsed = phonenumbers.parse(fallback, default_region)
    except phonenumbers.NumberParseException:
        return fallback
    if not phonenumbers.is_possible_number(parsed):
        return fallback
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
