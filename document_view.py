"""
Schmale Sicht auf ein geparstes HTML-Dokument (BeautifulSoup)

Die Extraktoren sprechen nur über select_all / text / attr mit dem DOM,
dazu kommt der bereinigte sichtbare Text für die Regex-Strategien.
"""
import re
from typing import List, Optional

from bs4 import BeautifulSoup, Comment, Tag

# Elemente, nach denen im Fließtext ein Zeilenumbruch steht
BLOCK_TAGS = [
    'p', 'div', 'section', 'article', 'header', 'footer', 'main', 'aside',
    'address', 'li', 'ul', 'ol', 'dl', 'dt', 'dd', 'tr', 'td', 'th', 'table',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'blockquote', 'pre', 'form', 'hr',
]

# Elemente ohne sichtbaren Text
INVISIBLE_TAGS = ['script', 'style', 'noscript', 'template', 'meta', 'link', 'iframe', 'svg']

_WHITESPACE = re.compile(r'\s+')
_INLINE_WHITESPACE = re.compile(r'[ \t\r\f\v\xa0]+')


class DocumentView:
    """DOM-Zugriff für die Feld-Extraktoren"""

    def __init__(self, html: str, parser: str = 'html.parser'):
        self.html = html or ''
        self.soup = BeautifulSoup(self.html, parser)
        self._parser = parser
        self._visible_text: Optional[str] = None

    def select_all(self, selector: str, root: Optional[Tag] = None) -> List[Tag]:
        """CSS-Selektor, Treffer in Dokumentreihenfolge"""
        scope = root if root is not None else self.soup
        return scope.select(selector)

    def text(self, element: Tag) -> str:
        """Text eines Elements, Whitespace zusammengefasst"""
        return _WHITESPACE.sub(' ', element.get_text(' ')).strip()

    def raw_text(self, element: Tag) -> str:
        """Unveränderter Inhalt, z.B. für <script>-Blöcke"""
        if element.string is not None:
            return str(element.string)
        return ''.join(element.strings)

    def attr(self, element: Tag, name: str) -> Optional[str]:
        value = element.get(name)
        if value is None:
            return None
        if isinstance(value, list):
            return ' '.join(value)
        return value

    @property
    def visible_text(self) -> str:
        """Sichtbarer Text des <body>, eine Zeile pro Block bzw. <br>"""
        if self._visible_text is None:
            self._visible_text = self._extract_visible_text()
        return self._visible_text

    def _extract_visible_text(self) -> str:
        # Eigene Kopie, damit das DOM für die anderen Strategien unverändert bleibt
        soup = BeautifulSoup(self.html, self._parser)

        for tag in soup(INVISIBLE_TAGS):
            if not tag.decomposed:
                tag.decompose()

        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        # Zeilenumbrüche im Quelltext sind nur Leerraum (außer in <pre>)
        for string in soup.find_all(string=True):
            if string.find_parent('pre') is None:
                string.replace_with(_WHITESPACE.sub(' ', str(string)))

        for br in soup.find_all('br'):
            br.replace_with('\n')

        for block in soup.find_all(BLOCK_TAGS):
            block.insert_before('\n')
            block.append('\n')

        root = soup.body or soup
        text = root.get_text()

        lines = []
        for line in text.split('\n'):
            line = _INLINE_WHITESPACE.sub(' ', line).strip()
            if line:
                lines.append(line)

        return '\n'.join(lines)
