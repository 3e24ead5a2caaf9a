from shellforms.main import main

main()
