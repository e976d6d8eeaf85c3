"""
Impressum Extraktor
Extrahiert Firmenname, Adresse, Telefon, E-Mail und Geschäftsführer aus einer
Impressum-Seite.

Features:
- Strukturierte Daten (JSON-LD inkl. @graph, Schema.org Microdata)
- DOM-Heuristiken (tel:/mailto:-Links, Überschriften, <strong>/<b>, <address>)
- Regex-Patterns auf dem sichtbaren Text (DE/EN)
- Alle Strategien laufen immer, jeder Treffer wird ein Candidate
"""
import json
import logging
import re
from typing import Any, Callable, Dict, Iterator, List, Optional
from urllib.parse import unquote

from bs4 import Tag

from candidates import (
    BOLD_FIRST_BONUS,
    CONFIDENCE,
    MATCH_RANK_PENALTY,
    POSITION_PENALTY,
    REGEX_RANK_PENALTY,
    Candidate,
    ExtractionResult,
    score,
)
from document_view import DocumentView

logger = logging.getLogger(__name__)

Strategy = Callable[[DocumentView], List[Candidate]]


class ImpressumExtractor:
    """
    Multi-Strategie-Extraktion für Impressum-Seiten
    Reine Funktion über dem HTML: gleiches HTML ergibt gleiches Ergebnis
    """

    # ===== KONSTANTEN =====

    ORGANIZATION_TYPES = {'Organization', 'LocalBusiness', 'Corporation'}

    # Rechtsformen (DE/AT)
    LEGAL_FORMS = (
        r'gGmbH|GmbH\s*&\s*Co\.\s*KG|GmbH|UG(?:\s*\(haftungsbeschränkt\))?'
        r'|AG|OHG|KG|GbR|e\.\s?V\.|e\.\s?K\.'
    )

    # Wie weit vor PLZ + Ort nach einer Straßenzeile gesucht wird (Zeichen)
    ADDRESS_LOOKBACK = 100

    # Schlüsselwörter, die eine Person-Microdata als Geschäftsführung markieren
    DIRECTOR_KEYWORDS = [
        'geschäftsführ', 'ceo', 'managing director', 'director', 'direktor',
        'vorstand', 'inhaber', 'vertretungsberechtigt', 'vertreten durch',
    ]

    def __init__(self):
        self._compile_patterns()

    def _compile_patterns(self):
        """Kompiliert Regex-Patterns für Performance"""

        self.legal_form_pattern = re.compile(
            rf'(?<!\w)(?:{self.LEGAL_FORMS})(?!\w)', re.IGNORECASE
        )

        # "Firma: ...", "Angaben gemäß § 5 TMG:\n..."
        self.company_pattern = re.compile(
            r'(?:\b(?:firmenname|firma|unternehmen|company(?:\s+name)?)[ \t]*:'
            r'|§[ \t]*5[ \t]*(?:tmg|ddg)[^\n]*?(?::|\n))'
            r'[ \t]*\n?[ \t]*([^\n]+)',
            re.IGNORECASE
        )

        self.non_company_heading = re.compile(r'impressum|imprint|kontakt|contact', re.IGNORECASE)

        # "Anschrift: Teststraße 1, 10115 Berlin"
        self.address_pattern = re.compile(
            r'\b(?:postanschrift|anschrift|adresse|address|sitz)\b[ \t]*:?[ \t]*\n?[ \t]*'
            r'([^\n]*?\b\d{4,5}[ \t]+[^\W\d_][^\n]*)',
            re.IGNORECASE
        )

        # PLZ + Ort auf einer Zeile
        self.postal_city_pattern = re.compile(r'\b\d{4,5}[ \t]+[A-ZÄÖÜ][^\n,\d|]*')

        self.street_pattern = re.compile(r'straße|strasse|str\.|weg|allee|gasse|platz', re.IGNORECASE)

        # Telefon-Patterns (Reihenfolge = Rang)
        self.phone_patterns = [
            # Tel/Telefon/Phone/Fon + Nummer
            re.compile(
                r'(?:\btel(?:efon)?|phone|\bfon)\b\.?[ \t]*(?:[:/][ \t]*)?'
                r'(\+?[\d(][\d \t/().\-]{5,}\d)',
                re.IGNORECASE
            ),
            # Strikt: Label mit Doppelpunkt + internationale Nummer
            re.compile(r'\b(?:Telefon|Tel\.?|Phone|Fon)[ \t]*:[ \t]*(\+\d{1,3}(?:[ \t\-/]?\(?\d+\)?){2,})'),
            # Freistehende Nummer (international oder national mit Vorwahl)
            re.compile(
                r'(?<![\w+])(?:'
                r'(?:\+|00)\d{1,3}[ \t\-/]?(?:\(0\)[ \t]?)?\d{1,5}(?:[ \t\-/]?\d{2,}){1,4}'
                r'|\(?0\d{2,5}\)?(?:[ \t\-/]+\d{2,}){1,4}'
                r')(?!\w)'
            ),
        ]

        # E-Mail-Patterns (Reihenfolge = Rang)
        self.email_patterns = [
            re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'),
            re.compile(
                r'\b(?:e-?mail|mail)[ \t]*:[ \t]*([A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,})\b',
                re.IGNORECASE
            ),
            # Obfuskiert: info [at] firma [dot] de, info(at)firma.de
            re.compile(
                r'\b([A-Za-z0-9._%+-]+)[ \t]*[\[({][ \t]*(?:at|ät|@)[ \t]*[\])}][ \t]*'
                r'([A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*)[ \t]*'
                r'(?:\.|[\[({][ \t]*(?:dot|punkt)[ \t]*[\])}])[ \t]*([A-Za-z]{2,})\b',
                re.IGNORECASE
            ),
        ]

        # Geschäftsführer-Patterns (Reihenfolge = Rang)
        self.ceo_patterns = [
            re.compile(
                r'\b(?:geschäftsführ(?:er(?:in(?:nen)?)?|ung)|ceo|managing\s+directors?'
                r'|vertretungsberechtigte[r]?|vertreten\s+durch|direktor(?:in)?|directors?)\b'
                r'[ \t]*:?[ \t]*\n?[ \t]*([^\n]+)',
                re.IGNORECASE
            ),
            re.compile(
                r'\b(?:vertretungsberechtigte[r]?\s+(?:ist|sind)|vertreten\s+durch|leitung)\b'
                r'[ \t]*:?[ \t]*\n?[ \t]*([^\n]+)',
                re.IGNORECASE
            ),
        ]

        self.name_separator = re.compile(r',|&|\||\n|\bund\b|\band\b', re.IGNORECASE)
        self.parenthetical = re.compile(r'\([^)]*\)')
        self.ceo_stray_words = re.compile(r'\b(?:ist|is|are|gmbh|ag|ug)\b', re.IGNORECASE)

        self.organization_itemtype = re.compile(r'Organization|LocalBusiness', re.IGNORECASE)
        self.person_itemtype = re.compile(r'Person', re.IGNORECASE)

    # ===== HAUPTMETHODE =====

    def extract(self, html: str, source: str = '') -> ExtractionResult:
        """
        Extrahiert alle Felder aus einer Impressum-Seite

        Args:
            html: HTML der Impressum-Seite
            source: absolute URL der Seite

        Returns:
            ExtractionResult mit deduplizierten, sortierten Kandidaten je Feld
        """
        doc = DocumentView(html)

        raw = {
            'company': self._run('company', doc, [
                self._company_jsonld,
                self._company_microdata,
                self._company_regex,
                self._company_heading,
                self._company_bold,
            ]),
            'address': self._run('address', doc, [
                self._address_jsonld,
                self._address_microdata,
                self._address_regex,
                self._address_postal,
                self._address_tag,
            ]),
            'phone': self._run('phone', doc, [
                self._phone_links,
                self._phone_regex,
            ]),
            'email': self._run('email', doc, [
                self._email_links,
                self._email_regex,
            ]),
            'ceos': self._run('ceos', doc, [
                self._ceos_regex,
                self._ceos_microdata,
            ]),
        }

        return ExtractionResult.from_raw(raw, source)

    def _run(self, field_name: str, doc: DocumentView, strategies: List[Strategy]) -> List[Candidate]:
        """Führt alle Strategien aus, eine fehlerhafte Strategie liefert nichts"""
        candidates = []
        for strategy in strategies:
            try:
                candidates.extend(strategy(doc))
            except Exception as e:
                logger.debug(f"Strategie {strategy.__name__} ({field_name}) übersprungen: {e}")
        return candidates

    # ===== STRUKTURIERTE DATEN =====

    def _jsonld_organizations(self, doc: DocumentView) -> List[Dict[str, Any]]:
        """Alle Organization/LocalBusiness-Objekte aus JSON-LD-Blöcken"""
        organizations = []
        for script in doc.select_all('script[type="application/ld+json"]'):
            try:
                data = json.loads(doc.raw_text(script))
            except (json.JSONDecodeError, TypeError) as e:
                logger.debug(f"JSON-LD nicht lesbar: {e}")
                continue

            for item in self._jsonld_items(data):
                if self._is_organization(item):
                    organizations.append(item)
        return organizations

    def _jsonld_items(self, data: Any) -> Iterator[Dict[str, Any]]:
        # Kann Liste, einzelnes Objekt oder @graph sein
        if isinstance(data, list):
            for entry in data:
                yield from self._jsonld_items(entry)
        elif isinstance(data, dict):
            yield data
            if '@graph' in data:
                yield from self._jsonld_items(data['@graph'])

    def _is_organization(self, item: Dict[str, Any]) -> bool:
        item_type = item.get('@type', '')
        types = item_type if isinstance(item_type, list) else [item_type]
        for t in types:
            if isinstance(t, str) and t.rsplit('/', 1)[-1].rsplit(':', 1)[-1] in self.ORGANIZATION_TYPES:
                return True
        return False

    def _own_names(self, doc: DocumentView, scope: Tag) -> List[Tag]:
        """itemprop="name" direkt dieses Scopes, nicht aus verschachtelten itemscopes"""
        return [
            element for element in doc.select_all('[itemprop~="name"]', root=scope)
            if element.find_parent(attrs={'itemscope': True}) is scope
        ]

    def _microdata_value(self, doc: DocumentView, element: Tag) -> str:
        content = doc.attr(element, 'content')
        if content and content.strip():
            return content.strip()
        return doc.text(element)

    # ===== FIRMENNAME =====

    def _company_jsonld(self, doc: DocumentView) -> List[Candidate]:
        candidates = []
        for org in self._jsonld_organizations(doc):
            name = org.get('name')
            if isinstance(name, str) and name.strip():
                candidates.append(Candidate(name.strip(), 'jsonld', CONFIDENCE['company']['jsonld']))
        return candidates

    def _company_microdata(self, doc: DocumentView) -> List[Candidate]:
        candidates = []
        for scope in doc.select_all('[itemscope][itemtype]'):
            if not self.organization_itemtype.search(doc.attr(scope, 'itemtype') or ''):
                continue
            names = self._own_names(doc, scope)
            if names:
                value = self._microdata_value(doc, names[0])
                if value:
                    candidates.append(Candidate(value, 'microdata', CONFIDENCE['company']['microdata']))
        return candidates

    def _company_regex(self, doc: DocumentView) -> List[Candidate]:
        text = doc.visible_text
        match = self.company_pattern.search(text)
        if not match:
            return []

        company = match.group(1).strip()
        legal_form = self.legal_form_pattern.search(company)
        if legal_form:
            # Alles nach der Rechtsform abschneiden ("Muster GmbH, Teststraße 1")
            company = company[:legal_form.end()]
        else:
            # Rechtsform fehlt: erste Rechtsform im Text anhängen
            legal_form = self.legal_form_pattern.search(text)
            if legal_form:
                company = f"{company} {legal_form.group(0)}"

        company = company.strip(' \t,;:')
        if not company:
            return []
        return [Candidate(company, 'regex-1', CONFIDENCE['company']['regex'])]

    def _company_heading(self, doc: DocumentView) -> List[Candidate]:
        for heading in doc.select_all('h1, h2'):
            text = doc.text(heading)
            if text and not self.non_company_heading.search(text):
                return [Candidate(text, 'heading', CONFIDENCE['company']['heading'])]
        return []

    def _company_bold(self, doc: DocumentView) -> List[Candidate]:
        texts = [doc.text(el) for el in doc.select_all('strong, b')]
        texts = [t for t in texts if 3 < len(t) < 50]

        base = CONFIDENCE['company']['bold']
        return [
            Candidate(t, 'bold', score(base + (BOLD_FIRST_BONUS if i == 0 else 0.0)))
            for i, t in enumerate(texts)
        ]

    # ===== ADRESSE =====

    def _address_jsonld(self, doc: DocumentView) -> List[Candidate]:
        candidates = []
        for org in self._jsonld_organizations(doc):
            address = org.get('address')
            entries = address if isinstance(address, list) else [address]
            for entry in entries:
                value = self._format_postal_address(entry)
                if value:
                    candidates.append(Candidate(value, 'jsonld', CONFIDENCE['address']['jsonld']))
        return candidates

    def _format_postal_address(self, address: Any) -> str:
        if isinstance(address, str):
            return address.strip()
        if not isinstance(address, dict):
            return ''

        parts = []
        for key in ('streetAddress', 'postalCode', 'addressLocality', 'addressRegion', 'addressCountry'):
            value = address.get(key)
            if isinstance(value, dict):
                value = value.get('name')
            if isinstance(value, (str, int)) and str(value).strip():
                parts.append(str(value).strip())
        return ', '.join(parts)

    def _address_microdata(self, doc: DocumentView) -> List[Candidate]:
        candidates = []
        for element in doc.select_all('[itemprop~="address"]'):
            value = self._microdata_value(doc, element)
            if value:
                candidates.append(Candidate(value, 'microdata', CONFIDENCE['address']['microdata']))
        return candidates

    def _address_regex(self, doc: DocumentView) -> List[Candidate]:
        match = self.address_pattern.search(doc.visible_text)
        if not match:
            return []
        address = match.group(1).strip(' \t,;')
        return [Candidate(address, 'regex-1', CONFIDENCE['address']['regex'])] if address else []

    def _address_postal(self, doc: DocumentView) -> List[Candidate]:
        """Jede PLZ + Ort, mit Straßenzeile davor falls vorhanden"""
        text = doc.visible_text
        candidates = []

        for i, match in enumerate(self.postal_city_pattern.finditer(text)):
            postal_city = match.group(0).strip()
            window = text[max(0, match.start() - self.ADDRESS_LOOKBACK):match.start()]

            street = None
            for line in reversed(window.split('\n')):
                if self.street_pattern.search(line):
                    street = line.strip(' \t,')
                    break

            if street:
                base = CONFIDENCE['address']['postal-context']
                candidates.append(Candidate(
                    f"{street}, {postal_city}", 'postal-context', score(base, POSITION_PENALTY * i)
                ))
            else:
                base = CONFIDENCE['address']['postal-only']
                candidates.append(Candidate(postal_city, 'postal-only', score(base, POSITION_PENALTY * i)))

        return candidates

    def _address_tag(self, doc: DocumentView) -> List[Candidate]:
        texts = [doc.text(el) for el in doc.select_all('address')]
        texts = [t for t in texts if len(t) > 10]

        base = CONFIDENCE['address']['address-tag']
        return [
            Candidate(t, 'address-tag', score(base, POSITION_PENALTY * i))
            for i, t in enumerate(texts)
        ]

    # ===== TELEFON =====

    def _phone_links(self, doc: DocumentView) -> List[Candidate]:
        candidates = []
        base = CONFIDENCE['phone']['tel-link']
        for link in doc.select_all('a[href^="tel:" i]'):
            href = doc.attr(link, 'href') or ''
            phone = unquote(href[len('tel:'):]).strip().lstrip('/')
            if not phone:
                phone = doc.text(link)
            if phone:
                candidates.append(Candidate(
                    phone, 'tel-link', score(base, MATCH_RANK_PENALTY * len(candidates))
                ))
        return candidates

    def _phone_regex(self, doc: DocumentView) -> List[Candidate]:
        return self._text_matches(doc.visible_text, self.phone_patterns, CONFIDENCE['phone']['regex'])

    # ===== E-MAIL =====

    def _email_links(self, doc: DocumentView) -> List[Candidate]:
        candidates = []
        base = CONFIDENCE['email']['mailto']
        for link in doc.select_all('a[href^="mailto:" i]'):
            href = doc.attr(link, 'href') or ''
            email = unquote(href[len('mailto:'):].split('?')[0]).strip()
            if email:
                candidates.append(Candidate(
                    email, 'mailto', score(base, MATCH_RANK_PENALTY * len(candidates))
                ))
        return candidates

    def _email_regex(self, doc: DocumentView) -> List[Candidate]:
        return self._text_matches(doc.visible_text, self.email_patterns, CONFIDENCE['email']['regex'])

    def _text_matches(self, text: str, patterns: List[re.Pattern], base: float) -> List[Candidate]:
        """Alle Treffer aller Patterns, Abzug je Regex-Rang und Treffer-Rang"""
        candidates = []
        for rank, pattern in enumerate(patterns):
            for position, match in enumerate(pattern.finditer(text)):
                if pattern.groups == 3:
                    # Obfuskierte E-Mail wieder zusammensetzen
                    value = f"{match.group(1)}@{match.group(2)}.{match.group(3)}"
                elif pattern.groups:
                    value = match.group(1)
                else:
                    value = match.group(0)

                value = ' '.join(value.split())
                if not value:
                    continue
                penalty = REGEX_RANK_PENALTY * rank + MATCH_RANK_PENALTY * position
                candidates.append(Candidate(value, f'regex-{rank + 1}', score(base, penalty)))
        return candidates

    # ===== GESCHÄFTSFÜHRER =====

    def _ceos_regex(self, doc: DocumentView) -> List[Candidate]:
        text = doc.visible_text
        base = CONFIDENCE['ceos']['regex']
        candidates = []

        for rank, pattern in enumerate(self.ceo_patterns):
            match = pattern.search(text)
            if not match:
                continue
            for position, name in enumerate(self._split_names(match.group(1))):
                penalty = REGEX_RANK_PENALTY * rank + MATCH_RANK_PENALTY * position
                candidates.append(Candidate(name, f'regex-{rank + 1}', score(base, penalty)))

        return candidates

    def _split_names(self, captured: str) -> List[str]:
        """Teilt "Max Muster, Erika Beispiel (Sprecherin) und John Doe" in Namen"""
        cleaned = self.parenthetical.sub('', captured)
        names = []
        for part in self.name_separator.split(cleaned):
            name = part.strip(' \t,;:')
            if len(name) < 3 or self.ceo_stray_words.search(name):
                continue
            names.append(name)
        return names

    def _ceos_microdata(self, doc: DocumentView) -> List[Candidate]:
        candidates = []
        base = CONFIDENCE['ceos']['microdata']

        for scope in doc.select_all('[itemscope][itemtype]'):
            if not self.person_itemtype.search(doc.attr(scope, 'itemtype') or ''):
                continue
            scope_text = doc.text(scope).lower()
            if not any(keyword in scope_text for keyword in self.DIRECTOR_KEYWORDS):
                continue
            names = self._own_names(doc, scope)
            if not names:
                continue
            value = self._microdata_value(doc, names[0])
            if value:
                candidates.append(Candidate(
                    value, 'microdata', score(base, MATCH_RANK_PENALTY * len(candidates))
                ))

        return candidates


_default_extractor: Optional[ImpressumExtractor] = None


def get_extractor() -> ImpressumExtractor:
    global _default_extractor
    if _default_extractor is None:
        _default_extractor = ImpressumExtractor()
    return _default_extractor


def extract_impressum(html: str, source: str = '') -> ExtractionResult:
    """Kurzform für ImpressumExtractor().extract()"""
    return get_extractor().extract(html, source)
