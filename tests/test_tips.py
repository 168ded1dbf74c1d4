from __future__ import annotations

import pytest

from glicosmart.tips import CATEGORIES, HEALTH_TIPS, HealthTip, tips_by_category


def test_all_tips_without_category() -> None:
    assert tips_by_category() == HEALTH_TIPS
    assert tips_by_category("Todos") == HEALTH_TIPS
    assert len(HEALTH_TIPS) == 10


@pytest.mark.parametrize(
    ("category", "expected"),
    [("Alimentação", 3), ("Exercícios", 2), ("Cuidados", 4), ("Geral", 1)],
)
def test_filter_by_category(category: str, expected: int) -> None:
    tips = tips_by_category(category)
    assert len(tips) == expected
    assert all(tip.category == category for tip in tips)


def test_category_match_ignores_case_and_accents() -> None:
    assert tips_by_category("exercicios") == tips_by_category("Exercícios")
    assert tips_by_category(" ALIMENTACAO ") == tips_by_category("Alimentação")


def test_unknown_category_is_empty() -> None:
    assert tips_by_category("Receitas") == ()


def test_catalog_integrity() -> None:
    assert {tip.category for tip in HEALTH_TIPS} == set(CATEGORIES)
    assert len({tip.id for tip in HEALTH_TIPS}) == len(HEALTH_TIPS)


def test_custom_catalog() -> None:
    extra = (HealthTip("x", "Teste", "Descricao", "Geral"),)
    assert tips_by_category("geral", extra) == extra
