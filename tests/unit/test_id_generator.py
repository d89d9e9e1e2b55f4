"""Unit tests for document ID generation."""

import re

import pytest

from mdshare.lib.exceptions import ExhaustedError, IdGenerationError
from mdshare.services.id_generator import IdGenerator

ID_PATTERN = re.compile(r"^[a-z0-9]{8}$")


class TestIdGenerator:
    """Unit tests for IdGenerator."""

    @pytest.fixture
    def generator(self):
        return IdGenerator()

    def test_generated_id_format(self, generator):
        """Generated IDs are 8 lowercase alphanumerics."""
        doc_id = generator.generate(lambda candidate: False)
        assert ID_PATTERN.match(doc_id)

    def test_ids_are_unique_over_many_draws(self, generator):
        """No collisions in a large sample."""
        ids = [generator.generate(lambda candidate: False) for _ in range(2000)]
        assert len(set(ids)) == len(ids)
        assert all(ID_PATTERN.match(doc_id) for doc_id in ids)

    def test_retries_on_collision(self, generator):
        """Collisions are retried until an unused ID is found."""
        checked = []

        def exists_check(candidate):
            checked.append(candidate)
            return len(checked) <= 3

        doc_id = generator.generate(exists_check)

        assert len(checked) == 4
        assert doc_id == checked[-1]

    def test_exhausted_budget_raises(self):
        """Every attempt colliding raises ExhaustedError after max_attempts checks."""
        generator = IdGenerator(max_attempts=10)
        calls = []

        def always_taken(candidate):
            calls.append(candidate)
            return True

        with pytest.raises(ExhaustedError) as exc_info:
            generator.generate(always_taken)

        assert len(calls) == 10
        assert isinstance(exc_info.value, IdGenerationError)
        assert exc_info.value.status_code == 500

    def test_custom_alphabet_and_length(self):
        generator = IdGenerator(length=4, alphabet="ab")
        doc_id = generator.generate(lambda candidate: False)
        assert len(doc_id) == 4
        assert set(doc_id) <= {"a", "b"}
