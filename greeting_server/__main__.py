from greeting_server.cli import main

main()
