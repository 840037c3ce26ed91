from edge_sim.cli import app

app(prog_name="edge-sim")
