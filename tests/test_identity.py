import pytest

from projectsplit.services.identity import looks_like_account_id, resolve_identifier


class StubDirectory:
    def __init__(self, users: dict[str, str]) -> None:
        self.users = users
        self.lookups: list[str] = []

    async def find_user_id_by_name(self, name: str):
        self.lookups.append(name)
        for user_name, user_id in self.users.items():
            if user_name.lower() == name.lower():
                return user_id
        return None


ALICE_ID = "64b7f0c2a1e4d3b2c1a09f8e"


def test_looks_like_account_id():
    assert looks_like_account_id(ALICE_ID)
    assert not looks_like_account_id("Alice")
    assert not looks_like_account_id(ALICE_ID[:-1])


@pytest.mark.asyncio
async def test_account_id_passes_through():
    directory = StubDirectory({})
    assert await resolve_identifier(directory, ALICE_ID) == ALICE_ID
    assert directory.lookups == []


@pytest.mark.asyncio
async def test_name_matched_ignoring_case():
    directory = StubDirectory({"Alice": ALICE_ID})
    assert await resolve_identifier(directory, "  alice ") == ALICE_ID


@pytest.mark.asyncio
async def test_unknown_name_stays_guest():
    directory = StubDirectory({"Alice": ALICE_ID})
    assert await resolve_identifier(directory, "Bob ") == "Bob"
