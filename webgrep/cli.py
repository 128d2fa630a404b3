# === FILE: webgrep/cli.py ===
#!/usr/bin/env python3
"""
Точка входа WebGrep: обход сайта и подсчёт вхождений ключевого слова.

Команды:
  search    Обойти сайт от стартового URL и вывести/сохранить отчёт
  config    Показать итоговую конфигурацию

Общие опции:
  --config PATH       YAML/JSON-конфиг (по умолчанию ./webgrep.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Дополнительно:
  --version, -v       Показать версию WebGrep

Пример:
  webgrep search -u https://example.com -k python -d 2 -m fuzzy -o json
"""
import asyncio
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from webgrep import __version__
from webgrep.aggregator import build_report
from webgrep.config import ConfigurationError, build_config, read_config_file
from webgrep.engine import start_crawl
from webgrep.logger import init_logging
from webgrep.matcher import MatchMode
from webgrep.report import dumps_json, render_html, render_json, render_text

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

EXIT_CONFIG_ERROR = 1
EXIT_FATAL = 2


def print_error(message: str, code: int = EXIT_CONFIG_ERROR):
    click.secho(message, fg='red', err=True)
    sys.exit(code)


def _config_error(exc: Exception):
    print_error(f'Configuration Error: {exc}\nUse -h or --help for usage information.')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='WebGrep, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """WebGrep: поиск ключевого слова по страницам сайта."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        raw = read_config_file(config_path)
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['raw_config'] = raw


@cli.command('search', context_settings=CONTEXT_SETTINGS)
@click.option('--url', '-u', default=None, help='Стартовый URL (обязателен)')
@click.option('--keyword', '-k', default=None, help='Искомое слово (обязательно)')
@click.option('--depth', '-d', type=click.IntRange(min=0), default=None, help='Максимальная глубина [1]')
@click.option(
    '--mode', '-m',
    type=click.Choice([m.value for m in MatchMode], case_sensitive=False),
    default=None,
    help='Режим сравнения [default]'
)
@click.option('--max-pages', '-p', type=click.IntRange(min=1), default=None, help='Лимит страниц [5000]')
@click.option('--max-bytes', '-b', type=click.IntRange(min=1), default=None, help='Лимит размера ответа [10 MiB]')
@click.option('--timeout-ms', '-t', type=click.IntRange(min=0), default=None, help='Таймаут запроса, мс [20000]')
@click.option('--allow-external', '-e', is_flag=True, help='Переходить на внешние домены')
@click.option('--insecure', '-i', is_flag=True, help='Не проверять TLS-сертификаты (опасно)')
@click.option('--concurrency', type=click.IntRange(min=1), default=None, help='Число параллельных воркеров [1]')
@click.option('--delay-ms', type=click.IntRange(min=0), default=None, help='Пауза между запросами к хосту, мс [100]')
@click.option(
    '--output', '-o',
    type=click.Choice(['text', 'json'], case_sensitive=False),
    default='text', show_default=True,
    help='Формат вывода в stdout'
)
@click.option(
    '--json', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--template', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблоном report.html.j2'
)
@click.option('--pretty/--compact', default=True, show_default=True, help='Отступы в JSON-выводе')
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Таймаут всего обхода (секунд); по истечении выводится частичный результат'
)
@click.pass_context
def search(ctx, url, keyword, depth, mode, max_pages, max_bytes, timeout_ms, allow_external,
           insecure, concurrency, delay_ms, output, json_output, html_output, template_dir,
           pretty, crawl_timeout):
    """Обойти сайт и посчитать вхождения ключевого слова."""
    try:
        cfg = build_config(
            ctx.obj['raw_config'],
            url=url,
            keyword=keyword,
            depth=depth,
            mode=mode,
            max_pages=max_pages,
            max_bytes=max_bytes,
            timeout_ms=timeout_ms,
            allow_external=True if allow_external else None,
            insecure_tls=True if insecure else None,
            concurrency=concurrency,
            delay_ms=delay_ms,
        )
    except ValidationError as e:
        _config_error(e)

    try:
        result = asyncio.run(start_crawl(cfg, crawl_timeout=crawl_timeout))
    except ConfigurationError as e:
        _config_error(e)
    except Exception as e:
        print_error(f'Fatal Error: {e}', EXIT_FATAL)

    report = build_report(result, cfg)

    if not json_output and not html_output:
        if output.lower() == 'json':
            click.echo(dumps_json(report, pretty=pretty))
        else:
            click.echo(render_text(report))
        return

    if json_output:
        try:
            saved_json = render_json(report, json_output)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}', EXIT_FATAL)

    if html_output:
        try:
            saved_html = render_html(report, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except OSError as e:
            print_error(f'Ошибка при сохранении HTML: {e}', EXIT_FATAL)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать конфигурацию из файла (с умолчаниями) в JSON."""
    try:
        cfg = build_config(ctx.obj['raw_config'])
    except ValidationError as e:
        _config_error(e)
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
