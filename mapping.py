from templates.bdk import BDK_TEMPLATE
from templates.generic import GENERIC_TEMPLATE

# Registry of statement templates, looked up by detector score.
# GENERIC is the adaptive fallback and must stay registered.
STATEMENT_TEMPLATES = {
    "BDK": BDK_TEMPLATE,
    "GENERIC": GENERIC_TEMPLATE,
}

FALLBACK_TEMPLATE = "GENERIC"
