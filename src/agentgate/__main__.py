from agentgate.cli import run

run()
