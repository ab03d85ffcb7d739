from winsweep.cli import main

main()
