"""Respuestas de la asistente: consejos por medicion y por pregunta libre.

The responder is best-effort and never authoritative. Reading-triggered
advice uses the same bands as ``glicosmart.glucose.classify``; inside a band
it refines the text (values just above the hypoglycemia limit, values far
above the hyperglycemia limit).
"""

from __future__ import annotations

import math
import random
import re
import unicodedata
from collections.abc import Sequence
from dataclasses import dataclass

from glicosmart.glucose import GlucoseStatus, glucose_status
from glicosmart.model import Profile, Reading

WATER_ML_PER_KG = 35
LOW_NORMAL_BELOW = 90
CRITICAL_ABOVE = 250

PROFILE_MISSING = (
    "Olá! Por favor, complete seu perfil para que eu possa te dar conselhos "
    "personalizados."
)


@dataclass(frozen=True)
class ResponseRule:
    """Keyword group and the canned variants it answers with."""

    name: str
    keywords: tuple[str, ...]
    responses: tuple[str, ...]

    def matches(self, normalized: str) -> bool:
        return any(_has_word_prefix(normalized, kw) for kw in self.keywords)


RULES: tuple[ResponseRule, ...] = (
    ResponseRule(
        name="exercise",
        keywords=("exercicio", "treino", "academia", "caminhada", "corrida"),
        responses=(
            "💪 Excelente, {name}! Exercícios são fundamentais para o controle "
            "glicêmico.\n\n• Meça a glicemia antes e depois do treino\n"
            "• Abaixo de 100 mg/dL: faça um lanche com carboidrato + proteína\n"
            "• Acima de 250 mg/dL: evite exercícios intensos até normalizar\n"
            "• Hidrate-se durante toda a atividade",
            "🏃 Atividade física regular melhora a sensibilidade à insulina!\n\n"
            "• Aeróbico: 150 min/semana (caminhada, natação, ciclismo)\n"
            "• Musculação: 2-3x por semana\n"
            "• Melhor horário: 30-60 min após as refeições\n"
            "• Leve sempre uma fonte de glicose rápida",
            "⚡ O exercício pode baixar sua glicemia por até 24h!\n\n"
            "• Monitore mais nos dias de treino\n"
            "• Não treine em jejum com glicemia abaixo de 90 mg/dL\n"
            "• Se sentir tremores ou suor frio, pare e meça imediatamente",
        ),
    ),
    ResponseRule(
        name="harmful_foods",
        keywords=(
            "bolacha",
            "biscoito",
            "doce",
            "acucar",
            "refrigerante",
            "salgadinho",
            "chocolate",
            "bolo",
            "sorvete",
            "pizza",
        ),
        responses=(
            "⚠️ Cuidado, {name}! Esses alimentos causam picos de glicemia.\n\n"
            "🚫 Evite: bolachas, doces, refrigerantes, pão branco, frituras.\n"
            "💡 Prefira: castanhas, frutas com casca, iogurte natural, "
            "chocolate 70% cacau em pequena porção.",
        ),
    ),
    ResponseRule(
        name="nutrition",
        keywords=(
            "alimentacao",
            "dieta",
            "comer",
            "comida",
            "refeicao",
            "pao",
            "massa",
            "arroz",
            "fruta",
            "carne",
            "salada",
            "legume",
            "verdura",
        ),
        responses=(
            "🥗 Alimentação é a base do controle glicêmico!\n\n"
            "• Evite açúcar, refrigerantes e massas refinadas\n"
            "• Priorize vegetais, proteínas magras e gorduras boas\n"
            "• Método do prato: 50% vegetais, 25% proteína, 25% carboidrato",
            "🍽️ Dicas para suas refeições:\n\n"
            "• Coma a cada 3-4 horas\n"
            "• Comece pela salada\n"
            "• Mastigue devagar\n"
            "• Leia os rótulos: fuja do açúcar nos primeiros ingredientes",
            "🥑 Alimentos que ajudam no controle:\n\n"
            "• Aveia e leguminosas (liberam glicose devagar)\n"
            "• Peixes ricos em ômega-3\n"
            "• Vegetais verde-escuros",
        ),
    ),
    ResponseRule(
        name="hydration",
        keywords=("agua", "hidratar", "hidratacao", "sede", "beber"),
        responses=(
            "💧 Hidratação é essencial! A desidratação concentra o açúcar no "
            "sangue.\n\n• Meta diária: {hydration_goal}\n"
            "• Beba água mesmo sem sede\n"
            "• Com glicemia acima de 200: aumente a ingestão de água\n"
            "• Evite bebidas açucaradas",
        ),
    ),
    ResponseRule(
        name="symptoms",
        keywords=("tontura", "tremor", "suor", "fraqueza", "mal"),
        responses=(
            "🚨 ATENÇÃO - Possível hipoglicemia!\n\n"
            "1. Meça sua glicemia agora\n"
            "2. Abaixo de 70 mg/dL: coma 15g de carboidrato rápido\n"
            "3. Aguarde 15 minutos e meça novamente\n"
            "4. Se ainda estiver abaixo de 70, repita\n\n"
            "⚠️ Se não melhorar, procure ajuda médica!",
        ),
    ),
    ResponseRule(
        name="sleep_stress",
        keywords=("sono", "dormir", "cansaco", "estresse", "ansiedade"),
        responses=(
            "😴 Sono e estresse afetam muito a glicemia!\n\n"
            "• Durma 7-9h por noite\n"
            "• Evite telas 1h antes de dormir\n"
            "• O cortisol do estresse eleva a glicemia: pratique respiração "
            "profunda ou meditação",
        ),
    ),
    ResponseRule(
        name="results",
        keywords=("resultado", "valor", "normal", "alto", "baixo"),
        responses=(
            "📊 Entendendo seus resultados:\n\n"
            "🟢 Normal (70-144 mg/dL): continue assim\n"
            "🟡 Alerta (145-200 mg/dL): ajuste alimentação e exercícios\n"
            "🔴 Hiperglicemia (acima de 200 mg/dL): evite carboidratos e beba "
            "água\n"
            "⚠️ Hipoglicemia (abaixo de 70 mg/dL): ação imediata!\n\n"
            "{last_reading_line}",
        ),
    ),
    ResponseRule(
        name="history",
        keywords=(
            "media",
            "historico",
            "estatistica",
            "tendencia",
            "evolucao",
            "progresso",
        ),
        responses=(
            "📈 Análise do seu histórico:\n\n{trend_line}"
            "💡 Para melhorar sua média:\n"
            "• Meça em horários diferentes (jejum, pós-refeição)\n"
            "• Identifique quais alimentos elevam sua glicemia\n"
            "• Continue registrando suas medições!",
        ),
    ),
    ResponseRule(
        name="lab_terms",
        keywords=("a1c", "hemoglobina", "glicada"),
        responses=(
            "🔬 Hemoglobina glicada (A1C), média de 3 meses:\n\n"
            "• Abaixo de 5,7%: normal\n"
            "• 5,7-6,4%: pré-diabetes\n"
            "• 6,5% ou mais: diabetes\n"
            "• Meta para diabéticos: abaixo de 7%",
        ),
    ),
    ResponseRule(
        name="medication",
        keywords=("remedio", "medicamento", "insulina", "metformina"),
        responses=(
            "💊 Sobre medicamentos:\n\n"
            "⚠️ Nunca altere doses sem orientação médica!\n"
            "• Tome nos horários corretos e não pule doses\n"
            "• Alguns remédios podem causar hipoglicemia: monitore mais\n"
            "• Anote efeitos colaterais para relatar ao médico",
        ),
    ),
    ResponseRule(
        name="tips",
        keywords=("dica", "ajuda", "conselho"),
        responses=(
            "✨ Dica de ouro: meça a glicemia em horários variados para "
            "identificar padrões.",
            "🎯 Pequenas mudanças consistentes valem mais que mudanças "
            "drásticas temporárias.",
            "📱 Continue registrando suas medições: quanto mais dados, melhor "
            "posso te orientar.",
            "🌟 Você está no controle! Cada escolha saudável conta.",
        ),
    ),
)

_FALLBACK_WITH_READING: tuple[str, ...] = (
    "Entendi, {name}. Com sua glicemia atual em {current} mg/dL, "
    "{current_hint}. Como posso ajudar mais?",
    "Você sabia que manter um diário das refeições junto com as medições "
    "ajuda a identificar quais alimentos afetam sua glicemia?",
    "{name}, estou aqui para te ajudar! Pergunte sobre exercícios, "
    "alimentação, resultados, sintomas ou dicas de controle glicêmico.",
)

_FALLBACK_WITHOUT_READING: tuple[str, ...] = (
    "Olá, {name}! Estou aqui para te ajudar com dúvidas sobre glicemia, "
    "alimentação, exercícios e saúde. O que você gostaria de saber?",
    "Posso te ajudar com controle glicêmico, alimentação saudável e "
    "exercícios recomendados. Qual sua dúvida?",
    "Faça uma nova medição para análises mais precisas, ou me pergunte sobre "
    "qualquer aspecto do controle da glicemia.",
)

_ENCOURAGEMENT: tuple[str, ...] = (
    "✨ Perfeito, {name}! Glicemia ideal: {value} mg/dL. Continue com essa "
    "rotina saudável. 💚",
    "🎉 Ótima notícia! {value} mg/dL está na faixa ideal. Mantenha a "
    "alimentação e os exercícios.",
    "👏 Excelente controle, {name}! {value} mg/dL é perfeito. Continue assim!",
)


def normalize(text: str) -> str:
    """Lowercase and strip diacritics (``Açúcar`` -> ``acucar``)."""
    decomposed = unicodedata.normalize("NFD", text.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def hydration_target_ml(profile: Profile) -> int | None:
    """Daily water goal, ``weight_kg * 35`` rounded half up."""
    weight = profile.weight_kg
    if weight is None or weight <= 0:
        return None
    return int(math.floor(weight * WATER_ML_PER_KG + 0.5))


class Advisor:
    """Rule-based responder; ``rng`` makes variant selection reproducible."""

    def __init__(
        self,
        rng: random.Random | None = None,
        rules: Sequence[ResponseRule] = RULES,
    ) -> None:
        self._rng = rng or random.Random()
        self._rules = tuple(rules)

    def greeting(self, profile: Profile | None) -> str:
        if profile is None:
            return PROFILE_MISSING
        return (
            f"Olá {profile.name}! Sou sua assistente virtual. Estou monitorando "
            "sua glicemia e aqui para ajudar."
        )

    def advise_reading(self, reading: Reading, profile: Profile | None) -> str:
        """Proactive advice for a freshly recorded reading."""
        if profile is None:
            return PROFILE_MISSING
        value = reading.value
        name = profile.name
        status = glucose_status(value)

        if status is GlucoseStatus.HYPOGLYCEMIA:
            return (
                f"🚨 HIPOGLICEMIA DETECTADA!\n\n{name}, sua glicemia está em "
                f"{value} mg/dL!\n\nAÇÃO IMEDIATA:\n"
                "1. Coma 15g de carboidrato rápido AGORA (mel, suco ou balas)\n"
                "2. Aguarde 15 minutos\n3. Meça novamente\n"
                "4. Se ainda estiver abaixo de 70, repita\n\n"
                "⚠️ Não dirija nem opere máquinas!"
            )
        if status is GlucoseStatus.NORMAL:
            if value < LOW_NORMAL_BELOW:
                return (
                    f"⚠️ {name}, glicemia baixa: {value} mg/dL\n\n"
                    "Ainda não é hipoglicemia, mas está próximo!\n"
                    "• Faça um lanche leve (fruta + castanhas)\n"
                    "• Evite exercícios intensos agora\n"
                    "• Monitore em 1-2 horas"
                )
            return self._pick(_ENCOURAGEMENT).format(name=name, value=value)
        if status is GlucoseStatus.ALERT:
            return (
                f"🟡 Atenção, {name}. Glicemia em {value} mg/dL (alerta).\n\n"
                "• Evite doces e carboidratos refinados\n"
                "• Aumente o consumo de fibras e vegetais\n"
                "• Beba água e continue monitorando!"
            )
        if value > CRITICAL_ABOVE:
            return (
                f"🚨 ALERTA CRÍTICO, {name}!\n\nGlicemia muito alta: {value} "
                "mg/dL\n\nAções imediatas:\n• Beba 2-3 copos de água agora\n"
                "• Evite qualquer carboidrato\n• Monitore a cada 2 horas\n"
                "• Acima de 300 ou com sintomas graves, procure atendimento "
                "médico"
            )
        return (
            f"⚠️ {name}, glicemia elevada: {value} mg/dL\n\n"
            f"• Beba água (meta: {_hydration_goal(profile)})\n"
            "• Evite carboidratos nas próximas 3-4 horas\n"
            "• Faça atividade leve (caminhada de 15 min)\n"
            "• Na próxima refeição, priorize vegetais e proteínas"
        )

    def reply(
        self, text: str, profile: Profile | None, last_reading: Reading | None
    ) -> str:
        """Answer a free-text question; first matching rule wins."""
        if profile is None:
            return "Por favor, complete seu perfil para que eu possa te ajudar."
        context = _context(profile, last_reading)
        normalized = normalize(text)
        for rule in self._rules:
            if rule.matches(normalized):
                return self._pick(rule.responses).format(**context)
        fallback = (
            _FALLBACK_WITH_READING if last_reading else _FALLBACK_WITHOUT_READING
        )
        return self._pick(fallback).format(**context)

    def _pick(self, options: Sequence[str]) -> str:
        return options[self._rng.randrange(len(options))]


def _has_word_prefix(normalized: str, keyword: str) -> bool:
    return re.search(rf"\b{re.escape(keyword)}", normalized) is not None


def _hydration_goal(profile: Profile) -> str:
    target = hydration_target_ml(profile)
    if target is None:
        return "35ml por kg de peso (informe seu peso no perfil)"
    return f"{target}ml/dia (baseado no seu peso de {profile.weight}kg)"


def _context(profile: Profile, last_reading: Reading | None) -> dict[str, object]:
    current = last_reading.value if last_reading else None
    if current is None:
        last_reading_line = "Faça uma medição para análise personalizada."
        trend_line = ""
        current_hint = ""
    else:
        status = glucose_status(current)
        last_reading_line = f"Sua última leitura: {current} mg/dL"
        trend_line = (
            f"Sua última medição foi {current} mg/dL - {_TREND_LABEL[status]}\n\n"
        )
        current_hint = _CURRENT_HINT[status]
    return {
        "name": profile.name,
        "hydration_goal": _hydration_goal(profile),
        "current": current,
        "current_hint": current_hint,
        "last_reading_line": last_reading_line,
        "trend_line": trend_line,
    }


_TREND_LABEL: dict[GlucoseStatus, str] = {
    GlucoseStatus.HYPOGLYCEMIA: "⚠️ Baixo demais!",
    GlucoseStatus.NORMAL: "🟢 Excelente!",
    GlucoseStatus.ALERT: "🟡 Fique atento",
    GlucoseStatus.HYPERGLYCEMIA: "🔴 Atenção, está alto!",
}

_CURRENT_HINT: dict[GlucoseStatus, str] = {
    GlucoseStatus.HYPOGLYCEMIA: "⚠️ ATENÇÃO! Você precisa comer algo doce AGORA",
    GlucoseStatus.NORMAL: "você está em ótimo controle! Continue assim",
    GlucoseStatus.ALERT: "recomendo evitar carboidratos e beber bastante água",
    GlucoseStatus.HYPERGLYCEMIA: (
        "recomendo evitar carboidratos e beber bastante água"
    ),
}
