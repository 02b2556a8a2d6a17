from oauthflow.app import main

main()
