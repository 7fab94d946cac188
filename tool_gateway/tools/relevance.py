"""
Tool Relevance - lexical ranking of tools against a user prompt

Used by the manifest registry when the catalog holds more tools than the
LLM platform accepts. The ranking is deterministic and cheap:

- Text is accent-folded and lowercased, then split into alphanumeric tokens.
- Prompt tokens shorter than three characters and common stopwords
  (Spanish and English) are dropped.
- Each remaining prompt term is expanded with English resource nouns for
  the Spanish words users type ("propiedades" -> "properties").
- A term scores against a tool's name tokens (weight 3) and description
  tokens (weight 1). An exact token match counts fully; a shared stem (a
  common prefix of at least five characters) counts half.
- A term found verbatim inside the tool name earns a bonus.

Ties keep catalog order.
"""

import re
import unicodedata
from os.path import commonprefix
from typing import Callable, Optional, Sequence, TypeVar

T = TypeVar("T")

NAME_WEIGHT = 3.0
DESCRIPTION_WEIGHT = 1.0
STEM_FACTOR = 0.5
NAME_SUBSTRING_BONUS = 2.0
MIN_STEM_LENGTH = 5
MIN_TERM_LENGTH = 3

_TOKEN = re.compile(r"[a-z0-9]+")

STOPWORDS = frozenset(
    {
        # Spanish
        "ver", "los", "las", "del", "por", "para", "con", "una", "uno", "unos",
        "unas", "que", "mis", "tus", "sus", "como", "cual", "cuales", "donde",
        "todos", "todas", "dame", "quiero", "mostrar", "muestra", "muestrame",
        "listar", "lista", "necesito", "favor", "hay", "esta", "este", "estos",
        # English
        "the", "and", "for", "with", "from", "show", "list", "all", "get",
        "please", "want", "need", "what", "which", "where", "equivalent",
    }
)

# Spanish resource nouns (accent-folded) -> English resource names used in
# tool names and descriptions.
RESOURCE_SYNONYMS: dict[str, tuple[str, ...]] = {
    "propiedad": ("property", "properties"),
    "propiedades": ("properties", "property"),
    "inmueble": ("property", "properties"),
    "inmuebles": ("properties", "property"),
    "unidad": ("unit", "units"),
    "unidades": ("units", "unit"),
    "visita": ("visit", "visits"),
    "visitas": ("visits", "visit"),
    "contrato": ("lease", "leases"),
    "contratos": ("leases", "lease"),
    "alquiler": ("lease", "leases", "rent"),
    "alquileres": ("leases", "lease", "rent"),
    "enmienda": ("amendment", "amendments"),
    "enmiendas": ("amendments", "amendment"),
    "adenda": ("amendment", "amendments"),
    "adendas": ("amendments", "amendment"),
    "propietario": ("owner", "owners"),
    "propietarios": ("owners", "owner"),
    "dueno": ("owner", "owners"),
    "duenos": ("owners", "owner"),
    "inquilino": ("tenant", "tenants"),
    "inquilinos": ("tenants", "tenant"),
    "arrendatario": ("tenant", "tenants"),
    "arrendatarios": ("tenants", "tenant"),
    "pago": ("payment", "payments"),
    "pagos": ("payments", "payment"),
    "factura": ("invoice", "invoices"),
    "facturas": ("invoices", "invoice"),
    "cuenta": ("account", "accounts"),
    "cuentas": ("accounts", "account"),
    "documento": ("document", "documents"),
    "documentos": ("documents", "document"),
    "plantilla": ("template", "templates"),
    "plantillas": ("templates", "template"),
    "interesado": ("interested", "prospect"),
    "interesados": ("interested", "prospects"),
    "venta": ("sale", "sales"),
    "ventas": ("sales", "sale"),
    "moneda": ("currency", "currencies"),
    "monedas": ("currencies", "currency"),
    "divisa": ("currency", "currencies"),
    "divisas": ("currencies", "currency"),
    "cotizacion": ("exchange", "rate"),
    "usuario": ("user", "users"),
    "usuarios": ("users", "user"),
    "personal": ("staff",),
    "empleado": ("staff",),
    "empleados": ("staff",),
    "empresa": ("company", "companies"),
    "empresas": ("companies", "company"),
    "tablero": ("dashboard",),
    "panel": ("dashboard",),
    "resumen": ("dashboard", "summary"),
    "perfil": ("profile",),
    "salud": ("health",),
    "estado": ("status", "health"),
    "mensaje": ("message", "whatsapp"),
    "mensajes": ("messages", "whatsapp"),
}


def fold(text: str) -> str:
    """Lowercase and strip accents: 'Propiedádes' -> 'propiedades'."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).lower()


def tokenize(text: str) -> list[str]:
    return _TOKEN.findall(fold(text))


def prompt_terms(hint: str) -> set[str]:
    """
    Search terms for a prompt: meaningful tokens plus their synonyms.

    Example:
        >>> sorted(prompt_terms("ver propiedades"))
        ['properties', 'property', 'propiedades']
    """
    terms: set[str] = set()
    for token in tokenize(hint):
        if len(token) < MIN_TERM_LENGTH or token in STOPWORDS:
            continue
        terms.add(token)
        terms.update(RESOURCE_SYNONYMS.get(token, ()))
    return terms


def _match(term: str, tokens: Sequence[str]) -> float:
    best = 0.0
    for token in tokens:
        if token == term:
            return 1.0
        if len(commonprefix([term, token])) >= MIN_STEM_LENGTH:
            best = STEM_FACTOR
    return best


def score_tool(terms: set[str], name: str, description: str) -> float:
    """Relevance of one tool to a set of prompt terms; 0 means unrelated."""
    name_tokens = tokenize(name)
    description_tokens = tokenize(description)
    folded_name = fold(name)

    score = 0.0
    for term in terms:
        score += max(
            NAME_WEIGHT * _match(term, name_tokens),
            DESCRIPTION_WEIGHT * _match(term, description_tokens),
        )
        if term in folded_name:
            score += NAME_SUBSTRING_BONUS
    return score


def prioritize(
    items: Sequence[T],
    hint: Optional[str],
    limit: int,
    text_of: Callable[[T], tuple[str, str]],
) -> list[T]:
    """
    Fit items into limit, most prompt-relevant first.

    Args:
        items: Items in catalog order.
        hint: The user's prompt, if any.
        limit: Maximum number of items to return.
        text_of: Returns (name, description) for an item.

    Returns:
        items unchanged when they already fit. Otherwise, without a usable
        hint, the first limit items; with one, the limit highest-scoring
        items sorted by score descending, catalog order on ties.
    """
    if len(items) <= limit:
        return list(items)

    terms = prompt_terms(hint) if hint else set()
    if not terms:
        return list(items[:limit])

    ranked = sorted(
        enumerate(items),
        key=lambda pair: (-score_tool(terms, *text_of(pair[1])), pair[0]),
    )
    return [item for _, item in ranked[:limit]]
