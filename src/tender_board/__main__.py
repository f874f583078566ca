from tender_board.main import main

main()
