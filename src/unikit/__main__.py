from unikit.cli.synth import main

main()
