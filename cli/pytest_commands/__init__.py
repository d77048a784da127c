"""
CLI entry points for the pytest-based commands of the blob simulator.

These can be directly accessed in a prompt if the user has installed the package via:

```
python -m venv venv
source venv/bin/activate
pip install -e .
```

Then, the entry point can be executed via:

```
engine-blobs --help
# or, against a hive instance started with `./hive --dev --client go-ethereum`
HIVE_SIMULATOR=http://127.0.0.1:3000 engine-blobs --fork Prague -v
```

It can also be executed (and debugged) directly in an interactive python shell:

```
from cli.pytest_commands.engine_blobs import engine_blobs
from click.testing import CliRunner

runner = CliRunner()
result = runner.invoke(engine_blobs, ["--help"])
print(result.output)
```
"""
