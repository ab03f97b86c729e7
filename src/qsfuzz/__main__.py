from qsfuzz.cli import main

main()
