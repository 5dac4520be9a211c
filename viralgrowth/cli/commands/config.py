"""Config command - show the effective configuration."""

import json

import cyclopts
import yaml

from viralgrowth.cli.console import get_console
from viralgrowth.config import Config

app = cyclopts.App(name="config", help="Show the effective configuration")


@app.default
def show(as_json: bool = False) -> None:
    """Print the configuration after env, .env and VG_CONFIG_FILE are applied.

    Args:
        as_json: Print JSON instead of YAML.
    """
    console = get_console()
    data = Config().model_dump(mode="json")  # type: ignore[call-arg]
    if data["metadata"]["api_key"]:
        data["metadata"]["api_key"] = "********"

    if as_json:
        console.print_json(json.dumps(data))
    else:
        console.print(
            yaml.safe_dump(data, sort_keys=False), markup=False, highlight=False, soft_wrap=True
        )
