from luamod.cli import app

app()
