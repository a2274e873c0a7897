from trello2linear.cli import main

main()
