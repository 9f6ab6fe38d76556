# File: feed_scout/parser/sitemap_parser.py
"""feed_scout.parser.sitemap_parser: Модуль для парсинга sitemap.xml и извлечения URL."""

from __future__ import annotations

from typing import List

from lxml import etree


def parse_sitemap(xml_content: str) -> List[str]:
    """Разбирает XML content sitemap и возвращает список URL из тегов <loc>.

    Битый XML не считается ошибкой: парсер восстанавливается и возвращает
    то, что удалось прочитать (или пустой список).

    Args:
        xml_content: строка с содержимым sitemap.xml.

    Returns:
        Список URL, найденных в <loc> тегах, в порядке документа.
    """
    if not xml_content or not xml_content.strip():
        return []
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(xml_content.encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError:
        return []
    if root is None:
        return []
    locs = root.findall(".//{*}loc")
    return [loc.text.strip() for loc in locs if loc.text and loc.text.strip()]
