"""
Kandidaten-Modell, Konfidenz-Tabelle und Deduplizierung

Ein Candidate ist ein extrahierter Wert plus Methode und Konfidenz.
Pro Feld werden alle Kandidaten gesammelt, Duplikate zusammengelegt und
absteigend nach Konfidenz sortiert.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional

FIELDS = ('company', 'address', 'phone', 'email', 'ceos')

# Basis-Konfidenz je Feld und Strategie
CONFIDENCE = {
    'company': {
        'jsonld': 1.0,
        'microdata': 0.9,
        'regex': 0.8,
        'heading': 0.5,
        'bold': 0.3,
    },
    'address': {
        'jsonld': 1.0,
        'microdata': 0.9,
        'regex': 0.8,
        'postal-context': 0.7,
        'postal-only': 0.5,
        'address-tag': 0.8,
    },
    'phone': {
        'tel-link': 1.0,
        'regex': 0.7,
    },
    'email': {
        'mailto': 1.0,
        'regex': 0.7,
    },
    'ceos': {
        'microdata': 0.9,
        'regex': 0.8,
    },
}

# Abzüge
BOLD_FIRST_BONUS = 0.1
REGEX_RANK_PENALTY = 0.1    # je nachrangigem Regex
MATCH_RANK_PENALTY = 0.05   # je weiterem Treffer desselben Regex / Links
POSITION_PENALTY = 0.1      # je weiterem Adress-Treffer

MIN_CONFIDENCE = 0.05

SENTINEL_METHOD = 'none'
SENTINEL_CONFIDENCE = 0.1


def score(base: float, penalty: float = 0.0) -> float:
    """Rundet auf zwei Stellen und hält den Wert in (0, 1]"""
    value = round(base - penalty, 2)
    return min(1.0, max(MIN_CONFIDENCE, value))


def confidence_level(confidence: float) -> str:
    """Badge-Stufe für das Frontend"""
    if confidence >= 0.8:
        return 'high'
    if confidence >= 0.5:
        return 'medium'
    return 'low'


@dataclass(frozen=True)
class Candidate:
    value: str
    method: str
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'value': self.value,
            'method': self.method,
            'confidence': self.confidence,
        }


def sentinel() -> Candidate:
    return Candidate(value='', method=SENTINEL_METHOD, confidence=SENTINEL_CONFIDENCE)


def dedupe_candidates(candidates: List[Candidate]) -> List[Candidate]:
    """
    Legt Kandidaten mit gleichem Wert (getrimmt, case-insensitive) zusammen.

    Der Kandidat mit der höheren Konfidenz gewinnt, der andere wird verworfen.
    Das Ergebnis ist absteigend nach Konfidenz sortiert (stabil) und nie leer.
    """
    best: Dict[str, Candidate] = {}
    for candidate in candidates:
        key = candidate.value.strip().lower()
        existing = best.get(key)
        if existing is None or existing.confidence < candidate.confidence:
            best[key] = candidate

    ranked = sorted(best.values(), key=lambda c: c.confidence, reverse=True)
    if not ranked:
        ranked.append(sentinel())
    return ranked


@dataclass
class ExtractionResult:
    """Ergebnis für eine Impressum-Seite"""
    fields: Dict[str, List[Candidate]] = field(default_factory=dict)
    source: str = ''

    @classmethod
    def from_raw(cls, raw: Dict[str, List[Candidate]], source: str = '') -> 'ExtractionResult':
        return cls(
            fields={name: dedupe_candidates(raw.get(name, [])) for name in FIELDS},
            source=source,
        )

    def best(self, name: str) -> Optional[Candidate]:
        """Bester echter Kandidat eines Feldes (None wenn nur Sentinel)"""
        candidates = self.fields.get(name) or []
        if candidates and candidates[0].method != SENTINEL_METHOD:
            return candidates[0]
        return None

    def summary(self) -> Dict[str, Any]:
        """Flache Sicht: ein Wert pro Feld, CEOs als Liste, dazu die Badge-Stufe je Feld"""
        company = self.best('company')
        address = self.best('address')
        phone = self.best('phone')
        email = self.best('email')
        return {
            'company': company.value if company else 'Unknown',
            'address': address.value if address else 'Unknown',
            'phone': phone.value if phone else None,
            'email': email.value if email else None,
            'ceos': [c.value for c in self.fields.get('ceos', []) if c.method != SENTINEL_METHOD],
            'source': self.source,
            'levels': {
                name: confidence_level(self.fields[name][0].confidence) if self.fields.get(name) else 'low'
                for name in FIELDS
            },
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'fields': {
                name: [c.to_dict() for c in self.fields.get(name, [])]
                for name in FIELDS
            },
            'source': self.source,
        }
