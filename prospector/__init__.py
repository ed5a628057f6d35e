"""
Maps Prospector - AI-assisted local business prospecting.

Search businesses in a locality through Gemini (grounded on Google Maps),
review and score the candidates, discover contact emails, and keep the
promising ones in a local CRM.

CLI Usage:
    prospector search "boulangerie" "Lyon"
    prospector search "avocat" "Paris" --no-website-only -f json
    prospector crm list --sort score
    prospector web  # Start the JSON API

Library Usage:
    from prospector import search_businesses

    results = search_businesses("plombier", "Marseille")
    for r in results:
        print(r.business_data.name, r.business_data.rating)
"""

__version__ = "0.3.0"

# Semantic versioning
# MAJOR.MINOR.PATCH
VERSION_INFO = {
    "major": 0,
    "minor": 3,
    "patch": 0,
    "release": "beta",  # stable, beta, alpha
}


def get_version() -> str:
    """Get full version string."""
    version = f"{VERSION_INFO['major']}.{VERSION_INFO['minor']}.{VERSION_INFO['patch']}"
    if VERSION_INFO["release"] != "stable":
        version += f"-{VERSION_INFO['release']}"
    return version


from prospector.api import search_businesses, analyze_business, find_business_email

__all__ = [
    "search_businesses",
    "analyze_business",
    "find_business_email",
    "__version__",
    "get_version",
    "VERSION_INFO",
]
