"""
Explications déterministes du IA Score, une phrase par dimension.

Mêmes inputs → même liste, à l'octet près. La formulation mídia passe par le
MediaVerdict: statut de clip inconnu → langage conditionnel uniquement.
"""

from typing import List, Optional

from ..media.media_verdict import MediaInfo
from .ia_score import DataQuality, ScoreBreakdown
from .scoring_config import DEFAULT_CONFIG, ScoringConfig


PERFORMANCE_NOT_EVALUATED = "Performance não foi avaliada devido à indisponibilidade de dados via API."


def _points(n: int) -> str:
    return f"{n} ponto" if n == 1 else f"{n} pontos"


def explain_score(
    breakdown: ScoreBreakdown,
    data_quality: DataQuality,
    media_info: Optional[MediaInfo] = None,
    config: Optional[ScoringConfig] = None,
) -> List[str]:
    """
    Explique le score dimension par dimension.

    Args:
        breakdown: Breakdown du IA Score
        data_quality: Disponibilité des données
        media_info: Statut du clip + photos (None → statut inconnu)

    Returns:
        Exactement une phrase par dimension, dans l'ordre canonique.
    """
    maxima = (config or DEFAULT_CONFIG).max_by_dimension()
    verdict = (media_info or MediaInfo()).verdict
    explanations = []

    # Cadastro
    cadastro_max = maxima["cadastro"]
    cadastro_lost = cadastro_max - breakdown.cadastro
    if cadastro_lost > 0:
        explanations.append(
            f"Você perdeu {_points(cadastro_lost)} em Cadastro por informações incompletas no anúncio."
        )
    else:
        explanations.append(f"Cadastro está completo ({cadastro_max}/{cadastro_max} pontos).")

    # Mídia
    midia_max = maxima["midia"]
    midia_lost = midia_max - breakdown.midia
    if midia_lost > 0:
        explanations.append(f"Você perdeu {_points(midia_lost)} em Mídia. {verdict.message}")
    else:
        explanations.append(f"Mídia está completa ({midia_max}/{midia_max} pontos).")

    # Performance
    performance_max = maxima["performance"]
    performance_lost = performance_max - breakdown.performance
    if not data_quality.performance_available:
        explanations.append(PERFORMANCE_NOT_EVALUATED)
    elif performance_lost > 0:
        explanations.append(
            f"Você perdeu {_points(performance_lost)} em Performance. "
            "Melhorar visitas, conversão ou pedidos pode aumentar o score."
        )
    else:
        explanations.append(f"Performance está excelente ({performance_max}/{performance_max} pontos).")

    # SEO
    seo_max = maxima["seo"]
    if breakdown.seo < seo_max:
        explanations.append(
            f"SEO pode ser melhorado para aumentar o CTR nas buscas ({breakdown.seo}/{seo_max} pontos)."
        )
    else:
        explanations.append(f"SEO está otimizado ({seo_max}/{seo_max} pontos).")

    # Competitividade
    comp_max = maxima["competitividade"]
    if breakdown.competitividade < comp_max:
        explanations.append(
            "Competitividade pode ser melhorada através de preço e condições mais atraentes "
            f"({breakdown.competitividade}/{comp_max} pontos)."
        )
    else:
        explanations.append(f"Competitividade está no máximo ({comp_max}/{comp_max} pontos).")

    return explanations
