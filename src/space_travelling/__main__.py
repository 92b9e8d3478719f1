from space_travelling.app import main

main()
