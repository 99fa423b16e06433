from __future__ import annotations

import re
from typing import Optional, Protocol

ACCOUNT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


class UserDirectory(Protocol):
    async def find_user_id_by_name(self, name: str) -> Optional[str]: ...


def looks_like_account_id(value: str) -> bool:
    return bool(ACCOUNT_ID_RE.match(value))


async def resolve_identifier(directory: UserDirectory, value: str) -> str:
    """Map a typed name to an account id, or keep it as a guest name.

    Account ids pass through untouched. Anything else is looked up by name,
    ignoring case; names nobody is registered under are guest members.
    """
    if looks_like_account_id(value):
        return value
    name = value.strip()
    if not name:
        return name
    user_id = await directory.find_user_id_by_name(name)
    return user_id if user_id is not None else name
