from lineage_cli.main import app

app(prog_name="lineage")
