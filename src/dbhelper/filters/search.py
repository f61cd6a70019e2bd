import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from dbhelper.base.translation import Translator

logger = logging.getLogger(__name__)

CONNECTOR_AND = "AND"
CONNECTOR_OR = "OR"
KEYWORD_NOT = "NOT"

# Terms shorter than this are ignored
MIN_TERM_LENGTH = 2

_QUOTED_PATTERN = re.compile(r'"([^"]*)"')


class MessageType(Enum):
    INFO = "info"
    WARNING = "warning"


@dataclass
class FilterMessage:
    message: str
    type: MessageType

    def is_warning(self) -> bool:
        return self.type is MessageType.WARNING


class SearchParser:
    """
    Turns a free-text search string into a boolean SQL expression.

    Terms are separated by spaces, double quotes group several words into
    one term. AND, OR and NOT (or their translations) work as connectors;
    terms without a connector between them are joined with AND.

    Example:
        'foo OR "bar baz" NOT qux'
    """

    def __init__(self, translator: Optional[Translator] = None):
        self._translator = translator or Translator()
        self.messages: List[FilterMessage] = []

    def _add_message(self, message: str, message_type: MessageType) -> None:
        logger.debug(f"Search {message_type.value}: {message}")
        self.messages.append(FilterMessage(message, message_type))

    def get_keyword(self, term: str) -> Optional[str]:
        """Returns the canonical connector keyword for the term, if it is one."""
        upper = term.upper()
        for keyword in (CONNECTOR_AND, CONNECTOR_OR, KEYWORD_NOT):
            if upper == keyword or upper == self._translator.translate(keyword).upper():
                return keyword
        return None

    def get_search_terms(self, search: str) -> List[str]:
        """
        Splits the search string into terms and canonical keywords.

        Quoted phrases stay a single term, terms that are too short are
        dropped with an informational message.
        """
        if not search or not search.strip():
            return []

        literals = {}

        def extract(match: re.Match) -> str:
            marker = f"_LIT{len(literals)}_"
            literals[marker] = match.group(1)
            return f" {marker} "

        prepared = _QUOTED_PATTERN.sub(extract, search)

        terms = []
        for part in prepared.split():
            keyword = self.get_keyword(part)
            if keyword is not None:
                terms.append(keyword)
                continue

            term = literals.get(part, part)
            if len(term.strip()) < MIN_TERM_LENGTH:
                self._add_message(
                    f'The search term "{term}" has been ignored: '
                    f"search terms must be at least {MIN_TERM_LENGTH} characters long.",
                    MessageType.INFO,
                )
                continue

            terms.append(term)

        return terms

    def build_expression(
        self,
        terms: List[str],
        fields: List[str],
        generate_placeholder: Callable[[str], str],
        like_escape: str = "",
    ) -> str:
        """
        Builds the WHERE expression for the terms, one LIKE comparison per
        search field and term. Returns an empty string if no term is left.
        """
        if not terms or not fields:
            return ""

        parts: List[str] = []
        negate = False
        connector_pending = False
        last = len(terms) - 1

        for index, term in enumerate(terms):
            if term == KEYWORD_NOT:
                negate = True
                continue

            if term in (CONNECTOR_AND, CONNECTOR_OR):
                if index == 0 or index == last:
                    self._add_message(
                        f'The connector "{self._translator.translate(term)}" has been ignored: '
                        "the search may not start or end with a connector.",
                        MessageType.WARNING,
                    )
                    continue
                if connector_pending or not parts:
                    self._add_message(
                        f'The connector "{self._translator.translate(term)}" has been ignored: '
                        "it must be placed between two search terms.",
                        MessageType.WARNING,
                    )
                    continue
                parts.append(term)
                connector_pending = True
                continue

            if parts and not connector_pending:
                parts.append(CONNECTOR_AND)
            connector_pending = False

            placeholder = generate_placeholder("%" + term.replace("_", "\\_") + "%")

            if negate:
                comparisons = [f"{field} NOT LIKE {placeholder}{like_escape}" for field in fields]
                parts.append("(" + " AND ".join(comparisons) + ")")
                negate = False
            else:
                comparisons = [f"{field} LIKE {placeholder}{like_escape}" for field in fields]
                parts.append("(" + " OR ".join(comparisons) + ")")

        if parts and parts[-1] in (CONNECTOR_AND, CONNECTOR_OR):
            connector = parts.pop()
            self._add_message(
                f'The connector "{self._translator.translate(connector)}" has been ignored: '
                "the search may not start or end with a connector.",
                MessageType.WARNING,
            )

        if not parts:
            return ""
        if len(parts) == 1:
            return parts[0]

        return "(" + " ".join(parts) + ")"
