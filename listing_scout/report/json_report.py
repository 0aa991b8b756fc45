# listing_scout/report/json_report.py

"""
Генерация JSON-отчёта для проекта ListingScout.

Сериализация сводки запуска и объявлений в файл.
"""
import json
from pathlib import Path

from listing_scout.engine import ScrapeRun


def render_json(run: ScrapeRun, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Сохраняет итог запуска в формате JSON по указанному пути.

    :param run: объект ScrapeRun со сводкой и объявлениями
    :param output_path: путь к JSON-файлу
    :param pretty: отступ 2 вместо компактной записи
    :return: Path сохранённого файла

    Пример:
    ```python
    from listing_scout.report.json_report import render_json
    report_path = render_json(run, 'reports/run.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(run.to_dict(), f, ensure_ascii=False, indent=2 if pretty else None)

    return output
