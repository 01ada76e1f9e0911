"""Conversion between filesystem paths and systemd unit instance names.

The rules mirror ``systemd-escape --path``: ``/`` becomes ``-`` and every
byte outside the unit name alphabet is written as ``\\xHH``. Escaped runs are
always four characters long, so the transform is self-delimiting and
reversible.
"""
import os
import string

from odlauncher.errors import (
    InvalidInputError,
    MalformedEscapeError,
    UnitNameError,
)

# '-' and '\' are legal in unit names but carry meaning in escaped paths
_PASSTHROUGH = frozenset(
    (string.ascii_letters + string.digits + ':_.').encode('ascii')
)
_HEX_DIGITS = frozenset(string.hexdigits)
_ROOT_INSTANCE = '-'


def _escape_byte(byte: int) -> str:
    return f'\\x{byte:02x}'


def escape_string(value: str) -> str:
    """Escape a string for use in a unit name.

    A leading ``.`` is always escaped so the result never looks like a
    hidden file.
    """
    raw = os.fsencode(value)
    parts = []

    if raw[:1] == b'.':
        parts.append(_escape_byte(raw[0]))
        raw = raw[1:]

    for byte in raw:
        if byte == ord('/'):
            parts.append('-')
        elif byte in _PASSTHROUGH:
            parts.append(chr(byte))
        else:
            parts.append(_escape_byte(byte))

    return ''.join(parts)


def unescape_string(value: str) -> str:
    """Reverse :func:`escape_string`.

    Raises:
        MalformedEscapeError: If a backslash is not followed by ``x`` and
            exactly two hex digits
    """
    decoded = bytearray()
    i = 0

    while i < len(value):
        char = value[i]
        if char == '-':
            decoded += b'/'
            i += 1
        elif char == '\\':
            digits = value[i + 2:i + 4]
            if value[i + 1:i + 2] != 'x' or len(digits) != 2 \
                    or not _HEX_DIGITS.issuperset(digits):
                raise MalformedEscapeError(value, i)
            decoded.append(int(digits, 16))
            i += 4
        else:
            decoded += os.fsencode(char)
            i += 1

    return os.fsdecode(bytes(decoded))


def escape_path(path: str | os.PathLike[str]) -> str:
    """Escape an absolute path into a unit instance name.

    >>> escape_path('/home/test/yesYes')
    'home-test-yesYes'
    """
    value = os.fspath(path)
    if not value or value == '/':
        return _ROOT_INSTANCE

    value = value.removesuffix('/').removeprefix('/')
    if not value:
        return _ROOT_INSTANCE

    return escape_string(value)


def unescape_path(instance: str) -> str:
    """Recover the absolute path encoded by :func:`escape_path`.

    Raises:
        MalformedEscapeError: If the instance contains a broken escape
    """
    if instance == _ROOT_INSTANCE:
        return '/'
    return '/' + unescape_string(instance)


def template_unit(template: str, instance: str) -> str:
    """Substitute an instance into a template unit name.

    >>> template_unit('onedriver@.service', 'home-user-OneDrive')
    'onedriver@home-user-OneDrive.service'

    Raises:
        InvalidInputError: If the template is not of the form
            ``prefix@.suffix`` or the instance is empty
    """
    at_pos = template.find('@')
    dot_pos = template.rfind('.')

    if at_pos < 0 or template.count('@') != 1:
        raise InvalidInputError(
            f'Unit template must contain exactly one "@": {template!r}'
        )
    if dot_pos < at_pos:
        raise InvalidInputError(
            f'Unit template has no suffix after "@": {template!r}'
        )
    if not instance:
        raise InvalidInputError('Unit instance name must not be empty')

    return template[:at_pos + 1] + instance + template[dot_pos:]


def untemplate_unit(unit_name: str) -> str:
    """Extract the instance name from a templated unit name.

    The instance ends at the last ``.`` after the ``@``; instance names may
    contain dots themselves.

    Raises:
        UnitNameError: If the name has no ``@``
    """
    at_pos = unit_name.rfind('@')
    if at_pos < 0:
        raise UnitNameError(f'Not a templated unit name: {unit_name!r}')

    start = at_pos + 1
    dot_pos = unit_name.rfind('.', start)
    end = dot_pos if dot_pos >= 0 else len(unit_name)
    return unit_name[start:end]
