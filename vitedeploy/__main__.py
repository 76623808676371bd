from vitedeploy.pipeline import main

main()
