"""
Flask CLI commands for back-office setup.

Commands:
- flask init-db: Create all tables
- flask seed-languages: Insert the stock content languages
"""

import click
from sqlalchemy.exc import SQLAlchemyError
from backoffice.database import Base, get_engine, get_session
from backoffice.exceptions import BusinessLogicError
from backoffice.models import Language

# code, name, native name, rtl
STOCK_LANGUAGES = [
    ('fr', 'French', 'Français', False),
    ('ar', 'Arabic', 'العربية', True),
    ('en', 'English', 'English', False),
]


def seed_languages(session, default_code='fr'):
    """
    Insert missing stock languages. Returns the number of rows created.

    When no language is flagged as default yet, default_code must be one of
    the stock languages so that exactly one row ends up as the default.
    """
    existing = {code for (code,) in session.query(Language.code).all()}
    has_default = session.query(Language).filter(Language.is_default == True).first() is not None  # noqa: E712
    if not has_default and default_code not in {code for code, _, _, _ in STOCK_LANGUAGES}:
        raise BusinessLogicError(f"Unknown default language '{default_code}', expected one of fr, ar, en")
    created = 0
    for code, name, native_name, is_rtl in STOCK_LANGUAGES:
        if code in existing:
            continue
        session.add(Language(
            code=code,
            name=name,
            native_name=native_name,
            is_rtl=is_rtl,
            is_active=True,
            is_default=(not has_default and code == default_code),
        ))
        created += 1
    session.commit()
    return created


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create all tables."""
        Base.metadata.create_all(get_engine())
        click.echo(click.style('Tables created.', fg='green'))

    @app.cli.command('seed-languages')
    @click.option('--default', 'default_code', default=None, help='Default language code')
    def seed_languages_command(default_code):
        """Insert fr/ar/en if missing."""
        session = get_session()
        default_code = default_code or app.config.get('DEFAULT_LANGUAGE_CODE') or 'fr'
        try:
            created = seed_languages(session, default_code)
        except BusinessLogicError as e:
            raise click.BadParameter(e.message, param_hint='--default')
        except SQLAlchemyError as e:
            session.rollback()
            click.echo(click.style(f'Error seeding languages: {e}', fg='red'))
            return
        click.echo(click.style(f'{created} language(s) created.', fg='green'))
