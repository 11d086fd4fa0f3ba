from pcacore.run import main

main()
