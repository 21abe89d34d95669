from monorel.cli.app import main

main()
