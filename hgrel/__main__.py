from hgrel.cli.app import main

main()
