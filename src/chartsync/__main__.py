from chartsync.main import main

main()
