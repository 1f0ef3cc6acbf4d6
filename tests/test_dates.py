"""Tests for Italian date normalization."""

import pytest

from schooltenders.core.normalize import (
    DEADLINE_PATTERNS,
    extract_deadline,
    extract_publish_date,
    normalize_date,
    parse_date_text,
)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("15/06/2025", "2025-06-15"),
        ("1-2-2024", "2024-02-01"),
        ("05/09/24", "2024-09-05"),
        ("31/02/2025", "2025-02-31"),
        ("32/01/2025", None),
        ("10/13/2025", None),
        ("00/05/2025", None),
        ("15/06/225", None),
        ("nessuna data", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_date_text(text, expected):
    assert parse_date_text(text) == expected


class TestDeadline:
    def test_scade_il(self):
        assert extract_deadline("Il bando scade il 30/04/2025 alle 12:00") == "2025-04-30"

    def test_scadenza_without_colon(self):
        assert extract_deadline("Avviso pubblico scadenza 15/06/2025") == "2025-06-15"

    def test_data_scadenza(self):
        assert extract_deadline("Data scadenza: 1/7/25") == "2025-07-01"

    def test_termine_presentazione(self):
        text = "Termine presentazione domande: 20-11-2024"
        assert extract_deadline(text) == "2024-11-20"

    def test_case_insensitive(self):
        assert extract_deadline("SCADE IL 02/03/2025") == "2025-03-02"

    def test_invalid_match_falls_through_to_next_pattern(self):
        text = "scade il 40/01/2025 - data scadenza: 10/01/2025"
        assert extract_deadline(text) == "2025-01-10"

    def test_only_first_occurrence_of_a_pattern_is_used(self):
        text = "scade il 40/01/2025, prorogato: scade il 10/02/2025"
        assert extract_deadline(text) is None

    def test_unlabeled_date_is_ignored(self):
        assert extract_deadline("Bando mensa 15/06/2025") is None


class TestPublishDate:
    def test_pubblicato_il(self):
        assert extract_publish_date("Pubblicato il 03/02/2025") == "2025-02-03"

    def test_data_pubblicazione(self):
        assert extract_publish_date("Data pubblicazione: 3-9-24") == "2024-09-03"

    def test_independent_from_deadline(self):
        text = "Pubblicato il 01/03/2025 - scadenza: 31/03/2025"
        assert extract_publish_date(text) == "2025-03-01"
        assert extract_deadline(text) == "2025-03-31"


def test_scadenza_label_wins_over_termine_presentazione():
    text = "Termine presentazione domande: 01/02/2025, scadenza: 05/02/2025"
    assert extract_deadline(text) == "2025-02-05"


def test_normalize_date_respects_pattern_order():
    text = "scadenza: 01/01/2025 scade il 02/02/2025"
    assert normalize_date(text, DEADLINE_PATTERNS) == "2025-02-02"
