"""Main CLI entry point for Shell Container."""

import click

from .commands.config import config
from .commands.create import create
from .commands.purge import purge
from .commands.refresh import refresh
from .commands.remove import remove
from .commands.status import status
from .helpers import configure_logging
from ..core.constants import CONFIG_FILE_ENV_VAR, CONTEXT_DIR_ENV_VAR, IMAGE_ENV_VAR


@click.group()
@click.option('--image', envvar=IMAGE_ENV_VAR, help='Name of the session image')
@click.option('--context-dir', envvar=CONTEXT_DIR_ENV_VAR, type=click.Path(file_okay=False),
              help='Directory holding the image build context')
@click.option('--config', 'config_file', envvar=CONFIG_FILE_ENV_VAR, type=click.Path(dir_okay=False),
              help='JSON configuration file')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging, including build output')
@click.pass_context
def cli(ctx, image, context_dir, config_file, verbose):
    """Shell Container - Manage the session image and ephemeral shell containers"""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj.update({
        'image': image,
        'context_dir': context_dir,
        'config_file': config_file,
    })


# Register commands
cli.add_command(refresh)
cli.add_command(create)
cli.add_command(status)
cli.add_command(remove)
cli.add_command(purge)
cli.add_command(config)


if __name__ == '__main__':
    cli()
