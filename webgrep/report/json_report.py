# webgrep/report/json_report.py

"""
Генерация JSON-отчёта для проекта WebGrep.

Сериализация отчёта (см. webgrep.aggregator.build_report) в строку или файл.
"""
import json
from pathlib import Path
from typing import Any, Dict


def dumps_json(report: Dict[str, Any], *, pretty: bool = True) -> str:
    """Возвращает JSON-строку отчёта (Unicode без экранирования)."""
    return json.dumps(report, ensure_ascii=False, indent=2 if pretty else None)


def render_json(report: Dict[str, Any], output_path: Path | str) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути.

    :param report: словарь, собранный build_report
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from webgrep.report.json_report import render_json
    report_path = render_json(build_report(result, cfg), 'reports/report.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(report, f, ensure_ascii=False, indent=2)

    return output
