"""Tests for the character cache."""

import asyncio

from pdrpg.state import CharacterCache, CharacterClass, ErrorCode, LoadingPhase

from factories import character_data


class TestCharacterLoad:
    """Test loading the character."""

    def test_load(self, backend):
        cache = CharacterCache(backend)
        assert not cache.is_loaded

        assert asyncio.run(cache.load()) is True
        assert cache.level == 1
        assert cache.character.experience == 50

    def test_level_mismatch_rejected(self, backend):
        """A character whose level disagrees with its experience is refused."""
        cache = CharacterCache(backend)
        asyncio.run(cache.load())

        backend.set_response("get_character", character_data(level=3, experience=250))
        assert asyncio.run(cache.load()) is False

        assert cache.level == 1
        assert cache.error.code == ErrorCode.CHARACTER_LEVEL_MISMATCH
        assert cache.phase == LoadingPhase.ERROR

    def test_load_failure(self, backend):
        backend.fail("get_character", "Character not found")
        cache = CharacterCache(backend)

        assert asyncio.run(cache.load()) is False
        assert cache.character is None
        assert cache.error.code == ErrorCode.GET_CHARACTER_ERROR


class TestCharacterCreate:
    """Test provisioning."""

    def test_create(self, backend):
        cache = CharacterCache(backend)
        character = asyncio.run(cache.create(CharacterClass.WARRIOR))

        assert character.level == 1
        assert backend.called("create_character")[0]["payload"] == {"character_class": "Warrior"}

    def test_create_refused_when_cached(self, backend):
        cache = CharacterCache(backend)
        asyncio.run(cache.load())

        assert asyncio.run(cache.create("Mage")) is None
        assert cache.error.code == ErrorCode.CHARACTER_EXISTS
        assert backend.called("create_character") == []

    def test_initialize_creates_default(self, backend):
        """A failed first load provisions the default class."""
        backend.fail("get_character", "Character not found")
        backend.set_response("create_character", character_data(character_class="Bard"))
        cache = CharacterCache(backend)

        assert asyncio.run(cache.initialize("Bard")) is True
        assert cache.character.character_class == CharacterClass.BARD
        assert backend.called("create_character")[0]["payload"] == {"character_class": "Bard"}
        assert cache.error is None

    def test_initialize_skips_create_when_found(self, backend):
        cache = CharacterCache(backend)

        assert asyncio.run(cache.initialize()) is True
        assert backend.called("create_character") == []


class TestCharacterWrites:
    """Test experience and attribute changes."""

    def test_add_experience(self, backend):
        backend.set_response("add_experience", {
            "character": character_data(level=2, experience=150),
            "levelUp": True,
        })
        cache = CharacterCache(backend)
        asyncio.run(cache.load())

        result = asyncio.run(cache.add_experience(100))

        assert result.level_up is True
        assert cache.level == 2
        assert backend.called("add_experience")[0]["payload"] == {"expPoints": 100}

    def test_add_experience_mismatch(self, backend):
        backend.set_response("add_experience", {
            "character": character_data(level=1, experience=150),
            "levelUp": False,
        })
        cache = CharacterCache(backend)
        asyncio.run(cache.load())

        assert asyncio.run(cache.add_experience(100)) is None
        assert cache.character.experience == 50
        assert cache.error.code == ErrorCode.CHARACTER_LEVEL_MISMATCH

    def test_add_attribute_points(self, backend):
        backend.set_response("add_attribute_points", character_data(level=1, experience=50, wisdom=2))
        cache = CharacterCache(backend)

        character = asyncio.run(cache.add_attribute_points("wisdom", 2))

        assert character.attributes.wisdom == 2

    def test_unknown_attribute(self, backend):
        cache = CharacterCache(backend)

        assert asyncio.run(cache.add_attribute_points("luck", 1)) is None
        assert cache.error.code == ErrorCode.INVALID_INPUT
        assert backend.called("add_attribute_points") == []

    def test_update_class(self, backend):
        cache = CharacterCache(backend)
        character = asyncio.run(cache.update(CharacterClass.MAGE))

        assert character.character_class == CharacterClass.MAGE
        assert backend.called("update_character")[0]["payload"] == {"character_class": "Mage"}


class TestCharacterValidation:
    """Test local rejection of bad input and error-slot preservation."""

    def test_create_unknown_class(self, backend):
        cache = CharacterCache(backend)

        assert asyncio.run(cache.create("Paladin")) is None
        assert cache.error.code == ErrorCode.INVALID_INPUT
        assert "Paladin" in cache.error.message
        assert backend.called("create_character") == []

    def test_update_unknown_class(self, backend):
        cache = CharacterCache(backend)
        asyncio.run(cache.load())

        assert asyncio.run(cache.update("Paladin")) is None
        assert cache.error.code == ErrorCode.INVALID_INPUT
        assert cache.character.character_class == CharacterClass.WARRIOR
        assert backend.called("update_character") == []

    def test_initialize_unknown_default_class(self, backend):
        backend.fail("get_character", "Character not found")
        cache = CharacterCache(backend)

        assert asyncio.run(cache.initialize("Paladin")) is False
        assert cache.error.code == ErrorCode.INVALID_INPUT
        assert backend.called("create_character") == []

    def test_initialize_keeps_load_error_when_cached(self, backend):
        """A failed reload of an existing character doesn't try to create one."""
        cache = CharacterCache(backend)
        asyncio.run(cache.load())
        backend.fail("get_character", "timeout")

        assert asyncio.run(cache.initialize()) is False

        assert cache.error.code == ErrorCode.GET_CHARACTER_ERROR
        assert cache.error.message == "timeout"
        assert cache.level == 1
        assert backend.called("create_character") == []
