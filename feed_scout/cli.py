# === FILE: feed_scout/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска FeedScout через командную строку.

Команды:
  search SITE   Найти RSS/Atom/JSON фиды сайта и вывести их списком JSON
  config        Показать итоговую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (значения по умолчанию, если не указан)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования (e.g. "%(asctime)s %(levelname)s %(message)s")

Команда search опции:
  -m/-a/-b/--sitemap  Запустить только одну стратегию
  -d, --deepsearch    Добавить deep search после остальных стратегий
  --all               Не останавливаться на первой успешной стратегии
  --json PATH         Сохранить полный JSON-отчёт в файл
  --pretty            Преформатировать JSON-вывод (отступ 2)
  --search-timeout S  Таймаут всего поиска (секунд)

Дополнительно:
  --version, -v       Показать версию FeedScout

Пример:
  feed-scout search example.com --all --max-feeds 5 --pretty

Статусные строки печатаются в stderr, список фидов в stdout.
"""
import sys
import asyncio
from pathlib import Path

import click
from pydantic import ValidationError

from feed_scout import __version__
from feed_scout.config import load_config
from feed_scout.logger import init_logging
from feed_scout.scanner import start_scan
from feed_scout.report.json_report import render_json
from feed_scout.utils import normalize_site

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def status(message: str, **style):
    click.secho(message, err=True, **style)


def _listeners(show_errors: bool) -> dict:
    """Слушатели событий Engine: короткие статусные строки в stderr."""

    def on_start(data):
        status(f"Start {data.get('nice_name', data['module'])}")

    def on_end(data):
        feeds = data.get('feeds') or []
        status(f"Finished {data['module']}: {len(feeds)} feeds")

    def on_log(data):
        if data.get('message'):
            status(data['message'], fg='yellow')

    listeners = {'start': on_start, 'end': on_end, 'log': on_log}
    if show_errors:
        listeners['error'] = lambda data: status(data.get('error', ''), fg='red')
    return listeners


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='FeedScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML или JSON.'
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
    help='Путь к файлу логов (только stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(name)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Find RSS, Atom and JSON feeds on any website."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('search', context_settings=CONTEXT_SETTINGS)
@click.argument('site')
@click.option('--metasearch', '-m', is_flag=True, help='Meta search only')
@click.option('--anchorsonly', '-a', is_flag=True, help='Anchors search only')
@click.option('--blindsearch', '-b', is_flag=True, help='Blind search only')
@click.option('--sitemap', is_flag=True, help='Sitemap search only')
@click.option('--deepsearch', '-d', is_flag=True, help='Enable deep search')
@click.option('--depth', type=click.IntRange(min=0), default=None, help='Depth of deep search [3]')
@click.option('--max-links', type=click.IntRange(min=1), default=None,
              help='Maximum number of links to process during deep search [1000]')
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True), default=None,
              help='Timeout for fetch requests in seconds [5]')
@click.option('--keep-query-params', is_flag=True,
              help='Keep query parameters from the original URL when searching')
@click.option('--check-foreign-feeds', is_flag=True,
              help="Check if foreign domain URLs are feeds (but don't crawl them)")
@click.option('--max-errors', type=click.IntRange(min=1), default=None,
              help='Stop after a certain number of errors [5]')
@click.option('--max-feeds', type=click.IntRange(min=0), default=None,
              help='Stop search after finding a certain number of feeds [0 = unlimited]')
@click.option('--all', 'collect_all', is_flag=True,
              help='Run every strategy instead of stopping at the first one with results')
@click.option('--concurrency', type=click.IntRange(min=1), default=None,
              help='Parallel workers for deep search [5]')
@click.option('--show-errors', is_flag=True, help='Print non-fatal errors')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.option(
    '--search-timeout', 'search_timeout',
    type=float,
    default=None,
    help='Таймаут всего поиска (секунд)'
)
@click.pass_context
def search(ctx, site, metasearch, anchorsonly, blindsearch, sitemap, deepsearch, depth, max_links,
           timeout, keep_query_params, check_foreign_feeds, max_errors, max_feeds, collect_all,
           concurrency, show_errors, json_output, pretty, search_timeout):
    """Find feeds for SITE."""
    exclusive = [name for name, flag in (
        ('meta', metasearch), ('anchors', anchorsonly), ('blind', blindsearch), ('sitemap', sitemap)
    ) if flag]
    if len(exclusive) > 1:
        raise click.UsageError('Use only one of -m, -a, -b and --sitemap.')

    try:
        site = normalize_site(site)
    except ValueError as e:
        print_error(f'Неверный адрес сайта: {e}')

    try:
        options = ctx.obj['config'].with_overrides(
            strategy=exclusive[0] if exclusive else None,
            deep_search=deepsearch or None,
            depth=depth,
            max_links=max_links,
            timeout=timeout,
            keep_query_params=keep_query_params or None,
            check_foreign_feeds=check_foreign_feeds or None,
            max_errors=max_errors,
            max_feeds=max_feeds,
            stop_at_first=False if collect_all else None,
            concurrency=concurrency,
            show_errors=show_errors or None,
        )
    except ValidationError as e:
        print_error(f'Неверные параметры поиска: {e}')

    status(f'Searching feeds for {site}')
    try:
        scan = start_scan(site, options, _listeners(options.show_errors))
        if search_timeout:
            report = asyncio.run(asyncio.wait_for(scan, timeout=search_timeout))
        else:
            report = asyncio.run(scan)
    except asyncio.TimeoutError:
        print_error(f'Поиск не завершён за {search_timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при поиске: {e}')

    if report.found:
        status(report.message, fg='green')
    else:
        status(report.message, fg='yellow')
        if not options.deep_search and options.strategy is None:
            status('Try using the -d or --deepsearch flag to enable deep search.', fg='yellow')

    click.echo(report.json(pretty=pretty))

    if json_output:
        try:
            saved_json = render_json(report, json_output, pretty=True)
            status(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
