from ILP_Topology.main import main

main()
