"""Prompt builders for search, analysis and email discovery."""

from ..models import BusinessData

# Each strategy frames the same query differently to widen the result set
SEARCH_STRATEGIES = {
    "low_presence": (
        "Concentre-toi sur les établissements mal notés (moins de 4 étoiles) "
        "ou qui n'ont pas de site web."
    ),
    "popular": "Concentre-toi sur les établissements les plus populaires et les plus recommandés.",
    "nearby": "Concentre-toi sur les établissements situés au plus près du centre de {locality}.",
}

RESULT_SHAPE = """{
  "name": "Nom de l'entreprise",
  "address": "Adresse complète",
  "rating": 4.5 (nombre ou null),
  "userRatingCount": 120 (nombre d'avis ou null),
  "website": "URL du site (ou null)",
  "phone": "Numéro de téléphone (ou null)",
  "latitude": 48.85 (nombre ou null),
  "longitude": 2.35 (nombre ou null),
  "placeId": "Identifiant Google Maps (ou null)"
}"""


def build_search_prompt(query: str, locality: str, strategy: str, min_results: int = 5) -> str:
    """
    Build the grounded search prompt for one strategy.

    Raises:
        ValueError: if the strategy is unknown
    """
    if strategy not in SEARCH_STRATEGIES:
        raise ValueError(f"Unknown search strategy: {strategy}")

    focus = SEARCH_STRATEGIES[strategy].format(locality=locality)

    return f"""Tu es un assistant de prospection. Cherche des entreprises correspondant à cette requête : "{query}" à {locality}.
Utilise Google Maps pour vérifier leur existence.
{focus}

IMPORTANT : Une fois les résultats trouvés, génère UNIQUEMENT un tableau JSON strict (sans Markdown, sans texte autour).
Chaque objet du tableau doit avoir cette structure :
{RESULT_SHAPE}

Trouve au moins {min_results} résultats pertinents."""


def build_analysis_prompt(business: BusinessData) -> str:
    return f"""Agis comme un expert en développement commercial et stratégie digitale.
Analyse cette entreprise :
Nom: {business.name}
Site Web: {business.website or "Non renseigné"}
Note: {business.rating if business.rating is not None else "N/A"}
Nombre d'avis: {business.user_rating_count if business.user_rating_count is not None else "N/A"}
Adresse: {business.address or "N/A"}

Tâche :
1. Détermine si c'est une bonne cible pour une agence de marketing digital / développement web.
2. Donne un score de 0 à 100 (100 = prospect idéal).
3. Rédige un résumé de l'analyse en 2 phrases.
4. Suggère une approche commerciale ("Icebreaker") ou une offre spécifique.

Réponds en JSON uniquement."""


def build_email_prompt(business: BusinessData) -> str:
    location = f" ({business.address})" if business.address else ""
    website = f"\nSite web connu : {business.website}" if business.website else ""
    return f"""Cherche sur le web l'adresse email de contact publique de l'entreprise "{business.name}"{location}.{website}
Réponds UNIQUEMENT avec l'adresse email, ou le mot null si aucune adresse publique n'est trouvée."""
