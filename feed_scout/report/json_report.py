# feed_scout/report/json_report.py

"""
Генерация JSON-отчёта для проекта FeedScout.

Сериализация объекта FeedReport в файл.
"""
import json
from pathlib import Path
from feed_scout.aggregator import FeedReport


def render_json(report: FeedReport, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути.

    Файл содержит полный отчёт (``FeedReport.to_dict()``): сайт, фиды,
    стратегии, причину остановки и счётчики.

    :param report: объект FeedReport с результатами поиска
    :param output_path: путь к JSON-файлу
    :param pretty: отступ 2 (по умолчанию) или компактная запись
    :return: Path сохранённого файла
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(report.to_dict(), f, ensure_ascii=False, indent=2 if pretty else None)

    return output
