"""Main CLI application using Cyclopts.

The CLI drives an in-process autopilot; nothing outlives the command.
"""

import cyclopts

from viralgrowth.cli.commands import config, once, run

app = cyclopts.App(
    name="viralgrowth",
    help="ViralGrowth - scheduled single-flight upload autopilot",
)

app.command(run.app, name="run")
app.command(once.app, name="once")
app.command(config.app, name="config")


if __name__ == "__main__":
    app()
