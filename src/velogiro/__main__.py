from velogiro.cli import main

main()
