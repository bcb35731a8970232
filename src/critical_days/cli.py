import click

from critical_days import aggregate, diagnostics, extract


@click.group()
def cdrun() -> None:
    """Entry point for running critical days workflows."""


for module in [extract, aggregate, diagnostics]:
    runners = getattr(module, "RUNNERS", {})

    if not runners:
        continue

    command_name = module.__name__.split(".")[-1]

    @click.group(name=command_name)
    def workflow_runner() -> None:
        pass

    for name, runner in runners.items():
        workflow_runner.add_command(runner, name)

    cdrun.add_command(workflow_runner)
