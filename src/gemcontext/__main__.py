from gemcontext.server import main

main()
