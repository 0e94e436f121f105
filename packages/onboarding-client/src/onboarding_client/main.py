import sys

import typer

from onboarding_client.client import get_config
from onboarding_client.commands import project, section
from shared.logging import setup_logging

app = typer.Typer()


@app.callback()
def callback():
    """
    Customer onboarding CLI
    """
    config = get_config()
    # stdout is reserved for command output
    setup_logging(
        service_name=config.service_name,
        log_format=config.log_format,
        log_level=config.log_level,
        stream=sys.stderr,
    )


app.add_typer(project.app, name="project")
app.add_typer(section.app, name="section")


if __name__ == "__main__":
    app()
