from codegraph_bytecode.cli import main

main()
