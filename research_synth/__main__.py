from research_synth.main import run

run()
