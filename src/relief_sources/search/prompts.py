"""Prompts shared by the LLM search adapters.

Templates are formatted with ``str.format``; literal braces in the JSON
examples are doubled.
"""

from relief_sources.data import ResourceCategory
from relief_sources.data.models import RECOVERY_CATEGORIES

CATEGORY_TAXONOMY = "\n".join(
    f"- {c.value}" for c in ResourceCategory if c not in RECOVERY_CATEGORIES
)

JSON_OUTPUT_FORMAT = """\
IMPORTANT OUTPUT FORMAT - Return ONLY valid JSON:
{{
  "zipCode": "{postal_code}",
  "results": [
    {{
      "name": "Resource Name",
      "address": "Street Address, City",
      "phone": "Phone number or null",
      "description": "Brief description of services (max 280 chars)",
      "url": "https://example.gov/resource-page",
      "hours": "Hours of operation or null",
      "geolocation": {{"lat": 40.123, "lng": -74.456}} or null,
      "categories": ["emergency_shelter"]
    }}
  ]
}}

Return ONLY the JSON object, no additional text."""

CLAUDE_SEARCH_PROMPT = (
    """\
You are a disaster response resource expert. Find emergency and disaster \
response resources that serve ZIP code {postal_code}.

Only include organizations and facilities that actually exist and serve this \
area; do not invent resources. Prefer official sources (.gov, .org, .edu).

CATEGORIES to use (one or more per resource):
{categories}

For ZIP code {postal_code}, list 3-10 resources.

"""
    + JSON_OUTPUT_FORMAT
)

PERPLEXITY_SYSTEM_PROMPT = (
    "Provide only factual listings of disaster relief resources. "
    "No commentary or descriptions."
)

PERPLEXITY_PROSE_PROMPT = """\
Find current disaster relief resources for ZIP code {postal_code}. List only \
factual information:

**Format each resource as:**
- Organization/Program Name
- Location/Address (if available)
- Contact: Phone/Website
- Services: Brief list only
- Hours/Availability (if available)

**Include only:**
- FEMA assistance centers
- Emergency shelters currently open
- Food distribution sites
- Financial assistance programs
- Medical services for disaster victims

**Exclude:**
- General descriptions
- Background information
- Commentary or analysis

Focus on resources announced in official press releases and news within the \
past 60 days."""

PERPLEXITY_JSON_PROMPT = (
    """\
Find current disaster relief resources for ZIP code {postal_code}: FEMA \
assistance centers, open emergency shelters, food distribution sites, \
financial assistance programs and medical services for disaster victims. \
Focus on resources announced in official press releases and news within the \
past 60 days.

CATEGORIES to use (one or more per resource):
{categories}

"""
    + JSON_OUTPUT_FORMAT
)


def render_prompt(template: str, postal_code: str) -> str:
    return template.format(postal_code=postal_code, categories=CATEGORY_TAXONOMY)
