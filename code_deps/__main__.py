from code_deps.cli import cli

cli()
