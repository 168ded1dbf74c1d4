"""Catalogo de dicas de saude agrupadas por categoria."""

from __future__ import annotations

from dataclasses import dataclass

from glicosmart.advisor import normalize

ALL_CATEGORIES = "Todos"
CATEGORIES: tuple[str, ...] = ("Alimentação", "Exercícios", "Cuidados", "Geral")


@dataclass(frozen=True)
class HealthTip:
    """One entry of the tips page."""

    id: str
    title: str
    description: str
    category: str


HEALTH_TIPS: tuple[HealthTip, ...] = (
    HealthTip(
        id="1",
        title="Controle de Carboidratos",
        description=(
            "Monitore a quantidade de carboidratos em cada refeição. Prefira "
            "carboidratos complexos como grãos integrais, que liberam glicose "
            "mais lentamente."
        ),
        category="Alimentação",
    ),
    HealthTip(
        id="2",
        title="Hidratação Adequada",
        description=(
            "Beba pelo menos 2 litros de água por dia. A hidratação adequada "
            "ajuda os rins a eliminar o excesso de açúcar no sangue."
        ),
        category="Cuidados",
    ),
    HealthTip(
        id="3",
        title="Atividade Física Regular",
        description=(
            "Pratique exercícios por pelo menos 30 minutos na maioria dos dias "
            "da semana. Isso melhora a sensibilidade à insulina e ajuda a "
            "controlar a glicemia."
        ),
        category="Exercícios",
    ),
    HealthTip(
        id="4",
        title="Evite Açúcares Refinados",
        description=(
            "Doces, refrigerantes e alimentos processados com alto teor de "
            "açúcar causam picos rápidos de glicose. Opte por alternativas "
            "naturais."
        ),
        category="Alimentação",
    ),
    HealthTip(
        id="5",
        title="Monitore Regularmente",
        description=(
            "Verifique sua glicemia nos horários recomendados pelo seu médico. "
            "O monitoramento constante é chave para entender e controlar o "
            "diabetes."
        ),
        category="Cuidados",
    ),
    HealthTip(
        id="6",
        title="Gerencie o Estresse",
        description=(
            "O estresse pode elevar os níveis de glicose. Pratique técnicas de "
            "relaxamento como meditação, yoga ou hobbies que você goste."
        ),
        category="Cuidados",
    ),
    HealthTip(
        id="7",
        title="Fibras na Dieta",
        description=(
            "Alimentos ricos em fibras (vegetais, frutas, leguminosas) ajudam a "
            "retardar a absorção de açúcar, mantendo a glicemia mais estável."
        ),
        category="Alimentação",
    ),
    HealthTip(
        id="8",
        title="Sono de Qualidade",
        description=(
            "Durma de 7 a 9 horas por noite. A privação do sono pode afetar a "
            "sensibilidade à insulina e o controle da glicemia."
        ),
        category="Cuidados",
    ),
    HealthTip(
        id="9",
        title="Consulte um Nutricionista",
        description=(
            "Um profissional pode criar um plano alimentar personalizado para "
            "suas necessidades, auxiliando no controle do diabetes."
        ),
        category="Geral",
    ),
    HealthTip(
        id="10",
        title="Caminhada Pós-Refeição",
        description=(
            "Uma caminhada leve de 15-20 minutos após as refeições pode ajudar "
            "a reduzir os picos de glicemia pós-prandiais."
        ),
        category="Exercícios",
    ),
)


def tips_by_category(
    category: str | None = None, tips: tuple[HealthTip, ...] = HEALTH_TIPS
) -> tuple[HealthTip, ...]:
    """Filtra dicas por categoria; None o ``Todos`` devuelve todas.

    The match ignores case and accents (``exercicios`` finds
    ``Exercícios``). An unknown category yields an empty tuple.
    """
    if category is None or normalize(category) == normalize(ALL_CATEGORIES):
        return tips
    wanted = normalize(category.strip())
    return tuple(tip for tip in tips if normalize(tip.category) == wanted)
